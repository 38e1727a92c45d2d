"""Platform-specific helpers."""

from .paths import home, user_config_dir

__all__ = ["home", "user_config_dir"]
