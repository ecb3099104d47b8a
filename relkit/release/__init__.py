"""Release engine: shell, steps, retry policy, plugin contract and orchestrator."""
