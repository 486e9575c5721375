"""relix - APT repository manager core."""

__version__ = "0.3.0"
