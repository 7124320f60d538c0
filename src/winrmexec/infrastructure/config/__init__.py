"""Configuration persistence."""

from winrmexec.infrastructure.config.repository import CONFIG_NAME, ConfigRepository

__all__ = ["CONFIG_NAME", "ConfigRepository"]
