"""Environment-driven configuration for Gap Writer."""
