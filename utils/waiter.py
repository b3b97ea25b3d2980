"""
轮询等待引擎

wait_for() 反复求值谓词，满足即返回其值；超时抛出 WaitTimeoutError，
携带已耗时与最后一次观测到的异常。
"""
from __future__ import annotations

import time
from typing import Callable, Optional, Tuple, Type, TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_MS = 10000
DEFAULT_INTERVAL_MS = 500


class WaitTimeoutError(Exception):
    """等待条件在超时时间内未满足"""

    def __init__(self, message: str, elapsed_ms: float = 0.0, last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.elapsed_ms = elapsed_ms
        self.last_error = last_error


def wait_for(
    predicate: Callable[[], T],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    interval_ms: int = DEFAULT_INTERVAL_MS,
    description: str = "condition",
    reraise: Tuple[Type[BaseException], ...] = (),
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    轮询等待谓词返回真值

    谓词至少求值一次；抛出异常视为"尚未满足"。两次求值之间休眠 interval_ms，
    最后一次休眠会截断到剩余时间，满足后不再休眠。

    Args:
        predicate: 无参可调用对象，返回真值表示满足
        timeout_ms: 超时时间（毫秒）
        interval_ms: 轮询间隔（毫秒）
        description: 超时信息中的条件描述
        reraise: 立即向上抛出、不视为"尚未满足"的异常类型
        clock: 单调时钟（秒），测试中可替换
        sleep: 等待函数（秒），测试中可替换

    Returns:
        谓词返回的真值

    Raises:
        WaitTimeoutError: 超时
    """
    start = clock()
    last_error: Optional[BaseException] = None
    attempts = 0

    while True:
        attempts += 1
        try:
            result = predicate()
            if result:
                return result
        except reraise:
            raise
        except Exception as e:
            last_error = e

        elapsed_ms = (clock() - start) * 1000
        remaining_ms = timeout_ms - elapsed_ms
        if remaining_ms <= 0:
            message = f"Timed out after {elapsed_ms:.0f}ms waiting for {description} ({attempts} attempts)"
            if last_error is not None:
                message += f": {last_error}"
            logger.debug(message)
            raise WaitTimeoutError(message, elapsed_ms=elapsed_ms, last_error=last_error)

        sleep(min(interval_ms, remaining_ms) / 1000)
