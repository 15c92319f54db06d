"""Release lifecycle steps.

Each module is one step of the release cycle. Steps hold no state of their
own: they query git refs, the manifest and hosting-service objects, decide,
and act, so any step can be re-run by a fresh CI job.
"""
