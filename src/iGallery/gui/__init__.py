"""Qt integration for the gallery editor."""
