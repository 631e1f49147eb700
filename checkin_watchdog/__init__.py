"""Dead-man's-switch check-in watchdog."""
