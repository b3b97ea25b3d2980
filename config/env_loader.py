"""
环境变量加载器
负责从 .env 文件和系统环境变量加载配置覆盖项
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ._path import PROJECT_ROOT

# 环境变量 -> 配置路径
ENV_MAPPING: Dict[str, str] = {
    "ENV": "env",
    "PLATFORM": "platform",
    "APPIUM_HOST": "appium.host",
    "APPIUM_PORT": "appium.port",
    "IOS_DEVICE_NAME": "device.device_name",
    "IOS_PLATFORM_VERSION": "device.platform_version",
    "IOS_APP_PATH": "device.app_path",
    "IOS_BUNDLE_ID": "device.bundle_id",
    "WDA_URL": "wda.url",
    "ELEMENT_WAIT_TIMEOUT": "timeouts.element_wait",
    "PAGE_LOAD_TIMEOUT": "timeouts.page_load",
    "LOG_LEVEL": "log.log_level",
    "LOG_DIR": "log.log_dir",
    "SCREENSHOT_DIR": "report.screenshot_dir",
}


class EnvLoader:
    """环境变量加载器"""

    def __init__(self, env_file: Optional[Path] = None):
        self.env_file = env_file
        self._loaded = False

    def load(self) -> Dict[str, Any]:
        """加载 .env（若存在）并返回嵌套配置字典"""
        if not self._loaded:
            env_path = Path(self.env_file or os.getenv("ENV_FILE", PROJECT_ROOT / ".env"))
            if env_path.exists():
                load_dotenv(env_path, override=False)
            self._loaded = True

        return self._env_to_config()

    @staticmethod
    def _env_to_config() -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        for var, path in ENV_MAPPING.items():
            value = os.getenv(var)
            if value is None or value == "":
                continue
            if var in ("PLATFORM", "ENV"):
                value = value.lower()
            elif var == "LOG_LEVEL":
                value = value.upper()

            keys = path.split(".")
            current = config
            for key in keys[:-1]:
                current = current.setdefault(key, {})
            current[keys[-1]] = value
        return config
