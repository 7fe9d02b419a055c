"""Qt helpers, background tasks and controllers."""
