"""neonotes - a personal notes manager with a natural-language agent."""

__version__ = "0.1.0"
