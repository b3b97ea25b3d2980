"""
Capability 清洗工具

Appium 拒绝值为 None 或字符串 "undefined" 的 capability，提交前需要剔除。
0 / False / "" 属于有效值，必须保留。
"""
from typing import Any, Dict, Iterable, List

from utils.logger import get_logger

logger = get_logger(__name__)

UNDEFINED = "undefined"


def is_effectively_undefined(value: Any) -> bool:
    """None 或字符串 "undefined" 视为未定义"""
    return value is None or (isinstance(value, str) and value == UNDEFINED)


def remove_undefined(obj: Dict[str, Any]) -> Dict[str, Any]:
    """递归剔除未定义值（仅深入嵌套字典），返回新字典"""
    result: Dict[str, Any] = {}
    for key, value in obj.items():
        if is_effectively_undefined(value):
            continue
        result[key] = remove_undefined(value) if isinstance(value, dict) else value
    return result


def clean_capabilities(capabilities: Dict[str, Any]) -> Dict[str, Any]:
    """清洗 capabilities，记录被剔除的键"""
    cleaned = remove_undefined(capabilities)
    removed = find_undefined_paths(capabilities)
    if removed:
        logger.debug(f"Removed undefined capabilities: {removed}")
    return cleaned


def find_undefined_paths(obj: Dict[str, Any], prefix: str = "") -> List[str]:
    """返回所有未定义值的键路径（a.b.c 形式）"""
    paths: List[str] = []
    for key, value in obj.items():
        path = f"{prefix}{key}"
        if is_effectively_undefined(value):
            paths.append(path)
        elif isinstance(value, dict):
            paths.extend(find_undefined_paths(value, prefix=f"{path}."))
    return paths


def verify_capabilities(capabilities: Dict[str, Any]) -> bool:
    """检查 capabilities 中不存在未定义值"""
    offending = find_undefined_paths(capabilities)
    if offending:
        logger.error(f"Capabilities contain undefined values: {offending}")
        return False
    return True


def remove_capability_keys(capabilities: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """移除指定的顶层键，返回新字典"""
    drop = set(keys)
    return {k: v for k, v in capabilities.items() if k not in drop}
