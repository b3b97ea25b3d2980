"""
YAML 用例数据加载

文件结构固定为 {组名: 用例字典 | [用例字典, ...]}，
加载后统一为 {组名: [用例字典, ...]}。
"""
from pathlib import Path
from typing import Any, Dict, List

import yaml

MAX_FILE_SIZE = 1 * 1024 * 1024  # 1MB

Cases = Dict[str, List[Dict[str, Any]]]


class InvalidYamlFormatError(ValueError):
    """YAML 用例格式验证失败"""
    pass


def load_yaml_cases(file_path: Path) -> Cases:
    """
    加载并严格验证 YAML 用例文件

    :param file_path: YAML 文件路径
    :return: {group_name: [case_dict, ...]}
    :raises FileNotFoundError: 文件不存在或不是文件
    :raises InvalidYamlFormatError: 格式验证失败
    """
    file_path = Path(file_path)
    if not file_path.is_file():
        raise FileNotFoundError(f"YAML 用例文件不存在: {file_path}")

    if file_path.stat().st_size > MAX_FILE_SIZE:
        raise InvalidYamlFormatError(f"YAML 用例文件过大 (>1MB): {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidYamlFormatError(f"YAML 语法错误 in {file_path}:\n{e}") from e
    except UnicodeDecodeError as e:
        raise InvalidYamlFormatError(f"YAML 文件编码错误（需 UTF-8）in {file_path}:\n{e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InvalidYamlFormatError(
            f"YAML 根必须是字典，当前类型: {type(raw).__name__}\n文件: {file_path}"
        )

    return {group: _normalize_group(group, value, file_path) for group, value in raw.items()}


def _normalize_group(group: str, value: Any, file_path: Path) -> List[Dict[str, Any]]:
    if isinstance(value, dict):
        if not value:
            _raise_format_error(group, f"组 '{group}' 的值不能为空字典", file_path)
        return [value]

    if isinstance(value, list):
        if not value:
            _raise_format_error(group, f"组 '{group}' 的值不能为空列表", file_path)
        for idx, item in enumerate(value, start=1):
            if not isinstance(item, dict) or not item:
                _raise_format_error(
                    group,
                    f"组 '{group}' 的第 {idx} 个元素必须是非空字典，当前值: {item!r}",
                    file_path,
                )
        return value

    _raise_format_error(
        group,
        f"组 '{group}' 的值必须是字典或字典列表，当前类型: {type(value).__name__}，值: {value!r}\n"
        "  ✅ 正确格式:\n"
        f"      {group}:\n"
        "        - field1: value1\n"
        "          field2: value2",
        file_path,
    )


def _raise_format_error(group: str, message: str, file_path: Path) -> None:
    raise InvalidYamlFormatError(f"YAML 格式验证失败 in {file_path}\n组: '{group}'\n{message}")
