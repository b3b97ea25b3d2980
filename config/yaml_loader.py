from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from ._path import PROJECT_ROOT

BASE_FILE = "base.yaml"


class YamlLoader:
    """环境 YAML 加载器：base.yaml + {env}.yaml 深度合并，按修改时间缓存"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir or PROJECT_ROOT / "config" / "environments")
        self._cache: Dict[str, Tuple[Dict[str, Any], Dict[str, float]]] = {}

    def load_environment(self, env: str = "dev") -> Dict[str, Any]:
        """加载指定环境的配置（环境文件可缺省，base.yaml 必须存在）"""
        if env in self._cache:
            cached, mtimes = self._cache[env]
            if self._is_cache_valid(mtimes):
                return dict(cached)

        base_config, base_mtime = self._load_with_mtime(BASE_FILE)
        env_file = f"{env}.yaml"
        env_config, env_mtime = self._load_with_mtime(env_file)

        merged = deep_merge(base_config, env_config)
        self._cache[env] = (merged, {BASE_FILE: base_mtime, env_file: env_mtime})
        return dict(merged)

    def _is_cache_valid(self, mtimes: Dict[str, float]) -> bool:
        for filename, cached_mtime in mtimes.items():
            path = self.config_dir / filename
            if path.exists() and path.stat().st_mtime > cached_mtime:
                return False
        return True

    def _load_with_mtime(self, filename: str) -> Tuple[Dict[str, Any], float]:
        path = self.config_dir / filename
        if not path.exists():
            if filename == BASE_FILE:
                raise FileNotFoundError(f"基础配置文件不存在: {path}")
            return {}, 0

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"YAML解析错误 ({path}): {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"YAML 根必须是字典 ({path})，当前类型: {type(data).__name__}")
        return data, path.stat().st_mtime

    def clear_cache(self) -> None:
        self._cache.clear()


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    递归合并字典
    - override 中的值覆盖 base
    - 嵌套字典深度合并
    """
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
