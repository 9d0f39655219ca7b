"""Display formatting."""
