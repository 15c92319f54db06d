# SPDX-License-Identifier: MIT
"""Application services for binrelease.

Services implement the release steps, coordinating between the domain
layer (core/) and the external clients (git/, gh, the dependency resolver).
"""
