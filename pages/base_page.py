"""
BasePage - Page Object Pattern 基类

在 SelectorHelper（多候选定位）、wait_for（轮询等待）与 retry（动作重试）
之上提供通用的屏幕操作方法。所有页面对象类应继承此类，并声明 PAGE_IDENTIFIER。

失败语义：
    - 动作内元素未找到 → 按 RetryConfig 有限次重试，耗尽后抛出原始异常
    - 页面未加载 → PageNotLoadedError，不在本层重试
    - 导航动作首次失败 → 截图一次，便于排查
"""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, TypeVar

from selenium.common.exceptions import (
    ElementClickInterceptedException,
    ElementNotInteractableException,
    NoSuchElementException,
    StaleElementReferenceException,
)
from selenium.webdriver.remote.webelement import WebElement

from utils.logger import get_logger
from utils.retry import RetryConfig, retry
from utils.screenshot_helper import ScreenshotHelper
from utils.selector_helper import (
    ElementNotFoundError,
    ElementState,
    InvalidLocatorError,
    Selector,
    SelectorHelper,
    SelectorLike,
    as_selector,
)
from utils.session import SessionError
from utils.waiter import WaitTimeoutError, wait_for

logger = get_logger(__name__)

T = TypeVar("T")

# 可通过重试恢复的元素级异常
RETRYABLE_ERRORS = (
    ElementNotFoundError,
    NoSuchElementException,
    StaleElementReferenceException,
    ElementNotInteractableException,
    ElementClickInterceptedException,
)


class PageNotLoadedError(WaitTimeoutError):
    """页面标识元素在超时时间内未出现"""

    def __init__(self, page_name: str, message: str, elapsed_ms: float = 0.0,
                 last_error: Optional[BaseException] = None):
        super().__init__(message, elapsed_ms=elapsed_ms, last_error=last_error)
        self.page_name = page_name


class BasePage:
    """页面对象基类 - 封装通用的屏幕操作方法"""

    # 默认等待超时时间（毫秒）
    DEFAULT_TIMEOUT = 10000

    # 页面加载超时时间（毫秒）
    DEFAULT_PAGE_LOAD_TIMEOUT = 15000

    # 轮询间隔（毫秒）
    DEFAULT_POLL_INTERVAL = 500

    # 动作级重试策略
    DEFAULT_RETRY = RetryConfig(max_attempts=3, interval_ms=1000, exponential_backoff=True)

    # 标识当前屏幕的选择器，子类覆盖
    PAGE_IDENTIFIER: Optional[Selector] = None

    def __init__(self, driver, settings=None, screenshot_helper: Optional[ScreenshotHelper] = None):
        """
        初始化 BasePage

        Args:
            driver: Appium WebDriver 会话
            settings: ConfigManager 实例（可选，缺省使用类常量）
            screenshot_helper: 截图辅助对象（可选，缺省按 settings 的截图目录创建）
        """
        self.driver = driver
        self.settings = settings

        if settings is not None:
            self.timeout = settings.timeouts.element_wait
            self.page_load_timeout = settings.timeouts.page_load
            self.poll_interval = settings.timeouts.poll_interval
            self.candidate_timeout = settings.timeouts.candidate
            self.retry_config = RetryConfig.from_settings(settings.retry)
            screenshot_dir = settings.screenshot_dir
        else:
            self.timeout = self.DEFAULT_TIMEOUT
            self.page_load_timeout = self.DEFAULT_PAGE_LOAD_TIMEOUT
            self.poll_interval = self.DEFAULT_POLL_INTERVAL
            self.candidate_timeout = None
            self.retry_config = self.DEFAULT_RETRY
            screenshot_dir = None

        self.screenshot_helper = screenshot_helper or ScreenshotHelper(driver, screenshot_dir)
        self._page_name = self.__class__.__name__

    # ==================== 页面加载 ====================

    def wait_for_page_to_load(self, timeout: Optional[int] = None) -> None:
        """
        等待页面标识元素可见

        Raises:
            PageNotLoadedError: 超时（已截图）
        """
        if self.PAGE_IDENTIFIER is None:
            raise NotImplementedError(f"{self._page_name} does not declare PAGE_IDENTIFIER")

        timeout = timeout or self.page_load_timeout
        try:
            self.wait_for_element(self.PAGE_IDENTIFIER, timeout=timeout)
        except WaitTimeoutError as e:
            self.take_screenshot(f"{self._page_name}-not-loaded")
            raise PageNotLoadedError(
                self._page_name,
                f"{self._page_name} did not load within {timeout}ms: {e}",
                elapsed_ms=e.elapsed_ms,
                last_error=e.last_error,
            ) from e
        logger.debug(f"{self._page_name} loaded")

    def is_page_displayed(self) -> bool:
        """快速检查当前是否处于本页面（不等待）"""
        return self.PAGE_IDENTIFIER is not None and self.is_displayed(self.PAGE_IDENTIFIER)

    # ==================== 等待与查找 ====================

    def find(
        self,
        selector: SelectorLike,
        state: ElementState = "displayed",
        candidate_timeout: Optional[int] = None,
    ) -> WebElement:
        """
        按候选顺序解析元素

        Args:
            selector: Selector | str
            state: "displayed" | "exists"
            candidate_timeout: 每个候选的超时（毫秒）；缺省依次取 Selector 自身、
                timeouts.candidate 配置、解析器默认值

        Raises:
            ElementNotFoundError: 所有候选均未匹配
        """
        sel = as_selector(selector)
        if candidate_timeout is None and sel.candidate_timeout_ms is None:
            candidate_timeout = self.candidate_timeout
        return SelectorHelper.find(self.driver, sel, state, candidate_timeout)

    def find_all(self, selector: SelectorLike) -> List[WebElement]:
        """立即查询所有匹配元素（不等待）"""
        return SelectorHelper.find_all(self.driver, selector)

    def wait_for_element(
        self,
        selector: SelectorLike,
        timeout: Optional[int] = None,
        state: ElementState = "displayed",
        interval: Optional[int] = None,
    ) -> WebElement:
        """
        在总超时时间内轮询所有候选，直到任一满足 state

        Raises:
            WaitTimeoutError: 超时，携带耗时与最后一次错误
        """
        timeout = timeout or self.timeout
        interval = interval or self.poll_interval
        sel = as_selector(selector)

        return wait_for(
            lambda: SelectorHelper.find(self.driver, sel, state, candidate_timeout_ms=0),
            timeout_ms=timeout,
            interval_ms=interval,
            description=f"{sel} to be {state}",
            reraise=(SessionError, InvalidLocatorError),
        )

    def is_displayed(self, selector: SelectorLike, timeout: int = 0) -> bool:
        """元素是否可见；timeout 为每个候选的等待时间，0 表示只查询一次"""
        return SelectorHelper.exists(self.driver, selector, timeout_ms=timeout, state="displayed")

    def exists(self, selector: SelectorLike, timeout: int = 0) -> bool:
        """元素是否存在于元素树中（不要求可见）"""
        return SelectorHelper.exists(self.driver, selector, timeout_ms=timeout, state="exists")

    # ==================== 交互操作（带重试） ====================

    def _with_retry(self, action: Callable[[], T], description: str,
                    on_failure: Optional[Callable[[int, BaseException], None]] = None) -> T:
        return retry(
            action,
            self.retry_config,
            retry_on=RETRYABLE_ERRORS,
            on_failure=on_failure,
            description=description,
        )

    def click(self, selector: SelectorLike) -> None:
        """点击元素"""
        logger.debug(f"Clicking element: {selector}")
        self._with_retry(lambda: self.find(selector).click(), f"click {selector}")

    def set_text(self, selector: SelectorLike, text: str) -> None:
        """清空后输入文本"""
        logger.debug(f"Setting text on {selector}")

        def _set():
            element = self.find(selector)
            element.clear()
            element.send_keys(text)

        self._with_retry(_set, f"set text {selector}")

    def get_text(self, selector: SelectorLike) -> str:
        """获取元素文本"""
        return self._with_retry(lambda: self.find(selector).text or "", f"get text {selector}")

    def get_attribute(self, selector: SelectorLike, name: str) -> Optional[str]:
        return self._with_retry(lambda: self.find(selector).get_attribute(name), f"get {name} {selector}")

    def navigate(self, selector: SelectorLike, artifact_name: str) -> None:
        """
        点击导航类元素；首次失败时截图一次，随后继续按策略重试

        Args:
            selector: 导航元素
            artifact_name: 截图名称
        """

        def _capture_first(attempt: int, error: BaseException) -> None:
            if attempt == 1:
                logger.warning(f"Navigation via {selector} failed: {error}")
                self.take_screenshot(artifact_name)

        self._with_retry(lambda: self.find(selector).click(), f"navigate {selector}", on_failure=_capture_first)

    # ==================== 滑动与滚动 ====================

    def swipe_vertical(self, start_ratio: float, end_ratio: float, duration: int = 800) -> None:
        """按屏幕高度比例垂直滑动（duration 毫秒）"""
        size = self.driver.get_window_size()
        x = size["width"] // 2
        start_y = int(size["height"] * start_ratio)
        end_y = int(size["height"] * end_ratio)
        self.driver.swipe(x, start_y, x, end_y, duration)

    def swipe_up(self) -> None:
        """内容向上滚动（手指自下而上）"""
        self.swipe_vertical(0.7, 0.3)

    def swipe_down(self) -> None:
        self.swipe_vertical(0.3, 0.7)

    def scroll_to(self, selector: SelectorLike, max_swipes: int = 5) -> WebElement:
        """
        向下翻动直到元素可见

        Raises:
            ElementNotFoundError: 翻动 max_swipes 次后仍不可见
        """
        sel = as_selector(selector)
        for attempt in range(max_swipes + 1):
            if self.is_displayed(sel):
                return self.find(sel, candidate_timeout=0)
            if attempt < max_swipes:
                self.swipe_up()
        raise ElementNotFoundError(
            f"{sel} not visible after {max_swipes} swipes", attempted=sel.candidates
        )

    # ==================== 截图与调试 ====================

    def pause(self, ms: int) -> None:
        time.sleep(ms / 1000)

    def take_screenshot(self, name: str) -> str:
        return self.screenshot_helper.take_screenshot(name)

    def screenshot_on_failure(self, name: str = "failure") -> str:
        """失败截图（FAIL_ 前缀），截图失败只记录日志"""
        return self.screenshot_helper.take_failure_screenshot(name)

    @contextmanager
    def auto_screenshot_on_error(self, name: str = "operation"):
        """
        上下文管理器：操作失败时自动截图并重新抛出

        Usage:
            with page.auto_screenshot_on_error("checkout"):
                page.click(CHECKOUT_BUTTON)
        """
        try:
            yield
        except Exception as e:
            logger.error(f"{name} failed: {e}")
            self.screenshot_on_failure(name=name)
            raise

    def assert_visible(self, selector: SelectorLike, message: Optional[str] = None,
                       timeout: Optional[int] = None) -> None:
        try:
            self.wait_for_element(selector, timeout=timeout)
        except WaitTimeoutError:
            raise AssertionError(message or f"Element should be visible: {selector}") from None

    def assert_text(self, selector: SelectorLike, expected: str, exact: bool = False,
                    message: Optional[str] = None) -> None:
        actual = self.get_text(selector)
        if exact:
            assert actual == expected, message or f"Text should be exactly '{expected}', got '{actual}'"
        else:
            assert expected in actual, message or f"Text should contain '{expected}', got '{actual}'"

    def debug_info(self, selector: SelectorLike) -> Dict[str, Any]:
        """
        获取选择器的调试信息

        Returns:
            Dict[str, Any]: 命中的候选、策略、每个候选的尝试结果
        """
        try:
            element, info = SelectorHelper.resolve(self.driver, selector, "exists", candidate_timeout_ms=0)
            return {
                "locator": info.locator,
                "strategy": info.strategy,
                "attempts": list(info.attempts),
                "displayed": element.is_displayed(),
            }
        except ElementNotFoundError as e:
            return {"error": str(e), "attempts": e.attempts}

    def __repr__(self) -> str:
        return f"<{self._page_name} session={getattr(self.driver, 'session_id', None)}>"
