"""Output layer — human and JSON formatting for CLI results."""
