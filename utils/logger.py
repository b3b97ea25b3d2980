"""
日志配置模块

核心能力：
✅ 预编译正则脱敏（密码 / 卡号 / CVV / 邮箱）
✅ 处理器工厂统一创建与回收
✅ 延迟初始化，导入时不产生副作用
✅ 步骤跟踪装饰器与耗时上下文管理器
"""

import atexit
import logging
import os
import re
import sys
import threading
import traceback
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache, wraps
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set

from config import PROJECT_ROOT


# ==================== 配置集中管理 ====================

class LogConfig:
    """日志配置集中管理（来自环境变量，缺省值与 base.yaml 一致）"""
    LOG_DIR = Path(os.getenv("LOG_DIR") or PROJECT_ROOT / "logs")
    LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()
    MAIN_LOG_FILE = "test_run.log"
    BACKUP_COUNT = 7
    MAX_BYTES = 10 * 1024 * 1024  # 10MB
    ENABLE_COLORS = sys.stdout.isatty()
    SENSITIVE_KEYS: Set[str] = {
        'password', 'pwd', 'secret', 'card_number', 'cardnumber', 'cvv', 'token'
    }


# ==================== 敏感信息脱敏 ====================

_MASK_PATTERNS = [
    (re.compile(r'(?i)("?(?:password|pwd)"?\s*[:=]\s*"?)[^",&\s]+'), r'\1******'),
    (re.compile(r'(?i)("?cvv"?\s*[:=]\s*"?)\d{3,4}'), r'\1***'),
    (re.compile(r'secret_sauce'), '******'),
    # 13-19 位卡号，保留前 4 后 4
    (re.compile(r'\b(\d{4})\d{5,11}(\d{4})\b'), r'\1********\2'),
    (re.compile(r'([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})'), r'***@\2'),
]


@lru_cache(maxsize=256)
def _mask_cached(text: str) -> str:
    for pattern, repl in _MASK_PATTERNS:
        text = pattern.sub(repl, text)
    return text


def mask_sensitive_data(message: Any) -> Any:
    """敏感信息脱敏（非字符串原样返回）"""
    if not isinstance(message, str):
        return message
    return _mask_cached(message)


# ==================== 彩色格式化器 ====================

class ColorCodes:
    RESET = "\x1b[0m"
    CYAN = "\x1b[36m"
    GREEN = "\x1b[32m"
    YELLOW = "\x1b[33m"
    RED = "\x1b[31m"
    BG_RED = "\x1b[41m"
    WHITE = "\x1b[37m"
    BOLD = "\x1b[1m"
    CRITICAL = BOLD + BG_RED + WHITE


class ColoredFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: ColorCodes.CYAN,
        logging.INFO: ColorCodes.GREEN,
        logging.WARNING: ColorCodes.YELLOW,
        logging.ERROR: ColorCodes.RED,
        logging.CRITICAL: ColorCodes.CRITICAL,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        if not color:
            return super().format(record)
        original = record.levelname
        try:
            record.levelname = f"{color}{record.levelname}{ColorCodes.RESET}"
            return super().format(record)
        finally:
            record.levelname = original


# ==================== 处理器工厂 ====================

CONSOLE_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(module)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class HandlerFactory:
    """日志处理器工厂 - 统一管理资源"""
    _handlers: List[logging.Handler] = []
    _lock = threading.Lock()

    @classmethod
    def _ensure_log_dir(cls, log_dir: Path) -> Path:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            return log_dir
        except OSError as e:
            sys.stderr.write(f"Failed to create log directory: {e}\n")
            return Path.cwd()

    @classmethod
    def create_timed_handler(cls, log_dir: Path, filename: str, level: int) -> logging.Handler:
        handler = TimedRotatingFileHandler(
            filename=cls._ensure_log_dir(log_dir) / filename,
            when="midnight",
            interval=1,
            backupCount=LogConfig.BACKUP_COUNT,
            encoding="utf-8",
            delay=True
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        cls._register(handler)
        return handler

    @classmethod
    def create_rotating_handler(cls, log_dir: Path, filename: str, level: int) -> logging.Handler:
        handler = RotatingFileHandler(
            filename=cls._ensure_log_dir(log_dir) / filename,
            maxBytes=LogConfig.MAX_BYTES,
            backupCount=5,
            encoding="utf-8",
            delay=True
        )
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        cls._register(handler)
        return handler

    @classmethod
    def create_console_handler(cls, level: int, enable_colors: bool) -> logging.Handler:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        if enable_colors and LogConfig.ENABLE_COLORS:
            handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, "%H:%M:%S"))
        else:
            handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
        cls._register(handler)
        return handler

    @classmethod
    def _register(cls, handler: logging.Handler) -> None:
        with cls._lock:
            cls._handlers.append(handler)

    @classmethod
    def cleanup(cls) -> None:
        """进程退出时关闭所有处理器"""
        with cls._lock:
            for handler in cls._handlers:
                handler.close()
            cls._handlers.clear()


atexit.register(HandlerFactory.cleanup)


# ==================== 敏感数据过滤器 ====================

class SensitiveDataFilter(logging.Filter):
    """日志记录脱敏过滤器（消息与参数）"""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_sensitive_data(record.msg)
        if record.args:
            record.args = self._sanitize_args(record.args)
        return True

    def _sanitize_args(self, args: Any) -> Any:
        if isinstance(args, dict):
            return self._sanitize_dict(args)
        if isinstance(args, tuple):
            return tuple(self._sanitize_item(arg) for arg in args)
        return args

    def _sanitize_dict(self, d: Dict) -> Dict:
        return {
            k: "******" if self._is_sensitive_key(k) else self._sanitize_item(v)
            for k, v in d.items()
        }

    def _sanitize_item(self, item: Any) -> Any:
        if isinstance(item, dict):
            return self._sanitize_dict(item)
        return mask_sensitive_data(item) if isinstance(item, str) else item

    @staticmethod
    def _is_sensitive_key(key: Any) -> bool:
        key_str = str(key).lower()
        return any(s in key_str for s in LogConfig.SENSITIVE_KEYS)


# ==================== 主日志配置 ====================

_setup_lock = threading.Lock()


def setup_logger(
    name: str = "automation",
    log_level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    log_to_console: bool = True,
    log_to_file: bool = True,
    enable_colors: bool = True,
    enable_sensitive_filter: bool = True
) -> logging.Logger:
    """
    创建并配置日志器（重复调用直接返回已配置实例）

    Args:
        name: 日志器名称，子模块使用 "automation.xxx" 共享处理器
        log_level: 日志级别，缺省取 LOG_LEVEL 环境变量
        log_dir: 日志目录，缺省取 LOG_DIR 环境变量或 <project>/logs
        log_to_console: 是否输出到控制台
        log_to_file: 是否写入轮转文件
        enable_colors: 控制台是否彩色输出（仅 TTY 生效）
        enable_sensitive_filter: 是否启用脱敏过滤器
    """
    logger = logging.getLogger(name)

    with _setup_lock:
        if logger.handlers:
            return logger

        level = getattr(logging, (log_level or LogConfig.LOG_LEVEL).upper(), logging.INFO)
        logger.setLevel(level)
        logger.propagate = False
        directory = Path(log_dir or LogConfig.LOG_DIR)

        if log_to_console:
            logger.addHandler(HandlerFactory.create_console_handler(logging.DEBUG, enable_colors))

        if log_to_file:
            logger.addHandler(HandlerFactory.create_timed_handler(
                directory, LogConfig.MAIN_LOG_FILE, logging.DEBUG
            ))
            logger.addHandler(HandlerFactory.create_rotating_handler(
                directory, f"error_{datetime.now().strftime('%Y%m%d')}.log", logging.ERROR
            ))

        # 过滤器挂在处理器上，子日志器传播上来的记录同样会被脱敏
        if enable_sensitive_filter:
            sensitive_filter = SensitiveDataFilter()
            for handler in logger.handlers:
                handler.addFilter(sensitive_filter)

        if name == "automation":
            logger.debug("=" * 70)
            logger.debug(f"✅ Logger initialized: {name} | Level: {logging.getLevelName(level)}")
            logger.debug(f"📁 Log directory: {directory.resolve()}")
            logger.debug(f"⏰ UTC Time: {datetime.now(timezone.utc).isoformat()}")
            logger.debug("=" * 70)

        return logger


# ==================== 全局日志实例（延迟初始化） ====================

class LazyLogger:
    """延迟初始化日志记录器，避免重复注册处理器"""
    _instances: Dict[str, logging.Logger] = {}
    _lock = threading.Lock()

    @classmethod
    def get(cls, name: str, **kwargs) -> logging.Logger:
        if name not in cls._instances:
            with cls._lock:
                if name not in cls._instances:
                    cls._instances[name] = setup_logger(name, **kwargs)
        return cls._instances[name]


logger = LazyLogger.get("automation")


def get_logger(module: str) -> logging.Logger:
    """返回 automation 的子日志器，共享其处理器与过滤器"""
    child = logger.getChild(module)
    child.propagate = True
    return child


# ==================== 辅助工具 ====================

def log_exception(
    logger: logging.Logger = logger,
    exc: Optional[BaseException] = None,
    context: str = ""
) -> None:
    """记录异常及其堆栈（不吞掉异常，仅记录）"""
    if exc is None:
        exc = sys.exc_info()[1]
        if exc is None:
            return

    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    msg = f"Exception in {context}: {exc}" if context else str(exc)
    logger.error("%s\nTraceback:\n%s", msg, tb)


def log_step(step_name: str, logger: logging.Logger = logger) -> Callable:
    """步骤跟踪装饰器"""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger.info("▶️ Step: %s", step_name)
            try:
                result = func(*args, **kwargs)
                logger.info("✅ Step completed: %s", step_name)
                return result
            except Exception as e:
                logger.error("❌ Step failed: %s | Error: %s", step_name, e)
                raise
        return wrapper
    return decorator


@contextmanager
def log_duration(step_name: str, logger: logging.Logger = logger):
    """执行时间跟踪上下文管理器"""
    start = datetime.now()
    logger.debug("⏱️ Starting: %s", step_name)
    try:
        yield
    finally:
        duration_ms = (datetime.now() - start).total_seconds() * 1000
        logger.debug("✅ Completed: %s (%.2fms)", step_name, duration_ms)


__all__ = [
    "logger", "get_logger", "setup_logger", "log_exception",
    "log_step", "log_duration", "mask_sensitive_data",
    "SensitiveDataFilter", "LazyLogger", "LogConfig", "HandlerFactory",
]
