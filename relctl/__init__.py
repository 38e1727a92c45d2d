"""relctl - promote and migrate app versions on the platform."""

__version__ = "0.3.0"
