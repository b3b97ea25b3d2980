"""
ScreenshotHelper - 截图辅助类

将当前设备画面保存为 PNG（reports/screenshots/<name>_<ISO时间戳>.png），
并在生成 Allure 报告时附加到当前测试步骤。
截图失败只记录错误并返回空字符串，不会掩盖调用方的原始异常。
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from selenium.common.exceptions import WebDriverException

from config import PROJECT_ROOT
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SCREENSHOT_DIR = PROJECT_ROOT / "reports" / "screenshots"
FAILURE_PREFIX = "FAIL_"


# ==================== 元数据模型 ====================

class ScreenshotMetadata:
    """截图元数据"""

    def __init__(self, name: str, filepath: str, timestamp: datetime, size: Optional[int] = None):
        self.name = name
        self.filepath = filepath
        self.timestamp = timestamp
        self.size = size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "filepath": self.filepath,
            "datetime": self.timestamp.isoformat(),
            "size_kb": round(self.size / 1024, 2) if self.size else None,
        }

    def __repr__(self) -> str:
        return f"<ScreenshotMetadata {self.name} -> {self.filepath}>"


# ==================== 核心辅助类 ====================

class ScreenshotHelper:
    """
    截图辅助类

    Args:
        driver: Appium WebDriver 会话
        screenshot_dir: 截图保存目录（默认 <project>/reports/screenshots）
        enable_allure: 是否附加到 Allure 报告
    """

    def __init__(self, driver, screenshot_dir: Optional[Path] = None, enable_allure: bool = True):
        self.driver = driver
        self.screenshot_dir = Path(screenshot_dir or DEFAULT_SCREENSHOT_DIR)
        self.enable_allure = enable_allure
        self._history: List[ScreenshotMetadata] = []

    # ==================== 文件名 ====================

    @staticmethod
    def _sanitize_filename(name: str) -> str:
        """替换文件系统不安全字符，连续下划线合并"""
        sanitized = re.sub(r'[\\/*?:"<>|\s\[\]]', "_", name)
        sanitized = re.sub(r"_+", "_", sanitized).strip("_")
        return sanitized or "screenshot"

    @staticmethod
    def format_timestamp(moment: Optional[datetime] = None) -> str:
        """ISO-8601 UTC 时间戳（毫秒精度），':' 与 '.' 替换为 '-'"""
        moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
        iso = moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"
        return iso.replace(":", "-").replace(".", "-")

    @classmethod
    def build_filename(cls, name: str, moment: Optional[datetime] = None) -> str:
        return f"{cls._sanitize_filename(name)}_{cls.format_timestamp(moment)}.png"

    def ensure_dir(self) -> Path:
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        return self.screenshot_dir

    # ==================== 截图 ====================

    def take_screenshot(self, name: str) -> str:
        """
        截取当前画面

        Returns:
            str: 文件路径；失败时返回空字符串
        """
        try:
            filepath = self.ensure_dir() / self.build_filename(name)
            png = self.driver.get_screenshot_as_png()
            filepath.write_bytes(png)
        except (WebDriverException, OSError) as e:
            logger.error(f"Failed to take screenshot '{name}': {e}")
            return ""

        metadata = ScreenshotMetadata(name, str(filepath), datetime.now(timezone.utc), len(png))
        self._history.append(metadata)
        logger.info(f"Screenshot saved: {filepath}")

        if self.enable_allure:
            self._attach_to_allure(png, name)
        return str(filepath)

    def take_failure_screenshot(self, test_name: str) -> str:
        """测试失败截图，文件名带 FAIL_ 前缀"""
        return self.take_screenshot(f"{FAILURE_PREFIX}{test_name}")

    @staticmethod
    def _attach_to_allure(png: bytes, name: str) -> None:
        try:
            allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)
        except Exception:
            logger.debug("Allure attach failed for %s", name, exc_info=True)

    # ==================== 历史记录 ====================

    def get_history(self) -> List[ScreenshotMetadata]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()
