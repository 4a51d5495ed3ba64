"""Version information for neo-membership."""

__version__ = "0.3.0"
