"""Session acquisition adapters."""
