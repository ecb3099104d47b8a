from __future__ import annotations

# npm registry checks during init (ping, whoami, show)
REGISTRY_TIMEOUT_SECONDS = 10.0

# Remote API requests
API_TIMEOUT_SECONDS = 30.0

# Local git operations and registry CLI commands
SHELL_TIMEOUT_SECONDS = 5 * 60.0

# Remote API retry policy (transient failures only)
RETRY_ATTEMPTS = 3
RETRY_MIN_TIMEOUT_SECONDS = 1.0
RETRY_FACTOR = 2.0
