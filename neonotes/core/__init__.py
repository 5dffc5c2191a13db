"""Core functionality for neonotes."""
