"""Client library for the Clash party card game."""

__version__ = "0.1.0"
