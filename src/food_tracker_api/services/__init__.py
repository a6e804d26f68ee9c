"""Domain services and their providers."""
