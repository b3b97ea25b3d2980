"""
动作级重试引擎

retry() 在失败时按固定或指数退避重新执行操作，耗尽后原样抛出最后一次异常；
retry_until() 重复求值条件，返回条件是否最终成立。
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """
    重试策略

    Attributes:
        max_attempts: 最大尝试次数（≥ 1）
        interval_ms: 基础间隔（毫秒，≥ 0）
        exponential_backoff: 是否指数退避
    """
    max_attempts: int = 3
    interval_ms: int = 1000
    exponential_backoff: bool = True

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {self.interval_ms}")

    def delay_before(self, attempt: int) -> float:
        """
        第 attempt 次尝试之前的等待时间（毫秒）

        第 1 次为 0；之后固定为 interval_ms，或按 interval_ms * 2^(attempt-2) 递增。
        """
        if attempt <= 1:
            return 0
        if not self.exponential_backoff:
            return self.interval_ms
        return self.interval_ms * (2 ** (attempt - 2))

    @classmethod
    def from_settings(cls, retry_settings: Any) -> "RetryConfig":
        """由配置中的 RetryDefaults 构建"""
        return cls(
            max_attempts=retry_settings.max_attempts,
            interval_ms=retry_settings.interval_ms,
            exponential_backoff=retry_settings.exponential_backoff,
        )


DEFAULT_RETRY_CONFIG = RetryConfig()


def retry(
    operation: Callable[[], T],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_failure: Optional[Callable[[int, BaseException], None]] = None,
    description: str = "",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    执行操作，失败时按策略重试

    Args:
        operation: 无参可调用对象
        config: 重试策略
        retry_on: 触发重试的异常类型，其余异常直接抛出
        on_failure: 每次失败后的回调 (attempt, error)，在等待之前调用
        description: 日志中的操作描述
        sleep: 等待函数（秒），测试中可替换

    Returns:
        首次成功的返回值

    Raises:
        最后一次尝试抛出的原始异常（不包装）
    """
    label = description or getattr(operation, "__name__", "operation")
    last_error: Optional[BaseException] = None

    for attempt in range(1, config.max_attempts + 1):
        delay_ms = config.delay_before(attempt)
        if delay_ms > 0:
            logger.debug(f"Retrying {label} in {delay_ms}ms (attempt {attempt}/{config.max_attempts})")
            sleep(delay_ms / 1000)

        try:
            return operation()
        except retry_on as e:
            last_error = e
            logger.debug(f"{label} failed on attempt {attempt}/{config.max_attempts}: {e}")
            if on_failure is not None:
                on_failure(attempt, e)

    logger.warning(f"{label} failed after {config.max_attempts} attempts: {last_error}")
    raise last_error


def retry_until(
    condition: Callable[[], Any],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    description: str = "",
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    重复求值条件，直到为真或次数耗尽

    条件抛出异常视为"不成立"。

    Returns:
        bool: 条件是否在允许次数内成立
    """
    label = description or getattr(condition, "__name__", "condition")

    for attempt in range(1, config.max_attempts + 1):
        delay_ms = config.delay_before(attempt)
        if delay_ms > 0:
            sleep(delay_ms / 1000)

        try:
            if condition():
                return True
        except Exception as e:
            logger.debug(f"{label} raised on attempt {attempt}: {e}")

    logger.debug(f"{label} not satisfied after {config.max_attempts} attempts")
    return False
