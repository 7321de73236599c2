"""Version information for migrate-packages."""

__version__ = "1.0.0"
