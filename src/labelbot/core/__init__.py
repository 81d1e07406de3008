"""Domain models, interfaces and services."""
