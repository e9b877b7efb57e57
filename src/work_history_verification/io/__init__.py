"""IO layer."""
