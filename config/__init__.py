from ._path import PROJECT_ROOT
from .env_loader import EnvLoader
from .manager import AppConfig, ConfigManager
from .yaml_loader import YamlLoader

__all__ = [
    "AppConfig",
    "ConfigManager",
    "EnvLoader",
    "YamlLoader",
    "PROJECT_ROOT",
]
