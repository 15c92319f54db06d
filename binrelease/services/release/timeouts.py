from __future__ import annotations

# gh queries and release creation
GH_TIMEOUT_SECONDS = 60.0

# gh release upload / gh run download
GH_TRANSFER_TIMEOUT_SECONDS = 30 * 60.0

# Idempotent gh read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
