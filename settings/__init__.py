"""
Application configuration.
"""

from settings.config_loader import AppConfig, load_config, load_keys_from_env
from settings.services import Services, build_services

__all__ = ["AppConfig", "load_config", "load_keys_from_env", "Services", "build_services"]
