"""Admin account security service for the Resistance Radio backend."""

__version__ = "0.1.0"
