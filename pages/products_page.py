"""
商品列表页面对象
"""
import random
import re
from typing import List, Optional

from selenium.webdriver.remote.webelement import WebElement

from utils.logger import get_logger
from utils.retry import RetryConfig, retry
from utils.selector_helper import ElementNotFoundError, SelectorHelper, to_by

from .base_page import BasePage, PageNotLoadedError
from .login_page import LoginPage
from .login_selector import LOGIN_SCREEN
from .products_selector import (
    PRODUCTS_SCREEN,
    add_to_cart_buttons,
    cart_badge,
    cart_icon,
    product_by_name,
    product_items,
    product_prices,
    product_titles,
    sort_button,
    sort_options,
    toggle_view_button,
)

logger = get_logger(__name__)

# 按名称选择商品：3 次尝试，间隔 1 秒
SELECT_PRODUCT_RETRY = RetryConfig(max_attempts=3, interval_ms=1000, exponential_backoff=False)


class ProductsPage(BasePage):
    """商品列表页"""

    PAGE_IDENTIFIER = PRODUCTS_SCREEN

    def __init__(self, driver, settings=None, screenshot_helper=None, rng: Optional[random.Random] = None):
        super().__init__(driver, settings, screenshot_helper)
        self.rng = rng or random.Random()

    # ==================== 页面加载 ====================

    def handle_login_if_needed(self) -> bool:
        """仍停留在登录页时以标准用户登录，返回是否执行了登录"""
        if not self.is_displayed(LOGIN_SCREEN):
            return False
        logger.info("Login screen still showing, logging in as standard user")
        LoginPage(self.driver, self.settings, self.screenshot_helper).login_as_standard_user()
        return True

    def are_product_items_loaded(self) -> bool:
        return len(self.find_all(product_items)) > 0

    def wait_for_page_to_load(self, timeout: Optional[int] = None) -> None:
        """
        等待商品列表出现

        若仍在登录页则先登录；商品卡片已出现即视为加载完成。
        失败时截取 products-page-debug 并抛出 PageNotLoadedError。
        """
        self.handle_login_if_needed()
        if self.are_product_items_loaded():
            return
        try:
            super().wait_for_page_to_load(timeout)
        except PageNotLoadedError:
            self.take_screenshot("products-page-debug")
            raise

    # ==================== 商品查询 ====================

    def get_product_names(self) -> List[str]:
        return [element.text for element in self.find_all(product_titles)]

    def get_product_prices(self) -> List[float]:
        """商品价格（去掉 $ 前缀）"""
        prices = []
        for element in self.find_all(product_prices):
            text = (element.text or "").replace("$", "").strip()
            if text:
                prices.append(float(text))
        return prices

    def get_all_product_titles(self) -> List[str]:
        return self.get_product_names()

    def _element_at(self, elements: List[WebElement], index: int, what: str) -> WebElement:
        if not 0 <= index < len(elements):
            raise IndexError(f"{what} index {index} out of range (found {len(elements)})")
        return elements[index]

    def get_product_name_by_index(self, index: int) -> str:
        return self._element_at(self.find_all(product_titles), index, "Product").text

    def scroll_to_product(self, index: int, max_swipes: int = 5) -> WebElement:
        """向下翻动直到第 index 个商品卡片出现在元素树中"""
        for attempt in range(max_swipes + 1):
            items = self.find_all(product_items)
            if index < len(items) and items[index].is_displayed():
                return items[index]
            if attempt < max_swipes:
                self.swipe_up()
        raise ElementNotFoundError(f"Product #{index} not reachable after {max_swipes} swipes",
                                   attempted=product_items.candidates)

    def select_product_by_name(self, name: str) -> None:
        """
        按名称打开商品详情

        Raises:
            ElementNotFoundError: 3 次尝试后仍未找到（已截取 product-not-found）
        """
        selector = product_by_name.formatted(name=name)

        try:
            retry(lambda: self.find(selector).click(), SELECT_PRODUCT_RETRY,
                  retry_on=(ElementNotFoundError,), description=f"select product {name}")
        except ElementNotFoundError:
            self.take_screenshot("product-not-found")
            raise
        logger.info(f"Selected product: {name}")

    def navigate_to_random_product_details(self) -> str:
        names = self.get_product_names()
        if not names:
            raise ElementNotFoundError("No products listed", attempted=product_titles.candidates)
        name = self.rng.choice(names)
        self.select_product_by_name(name)
        return name

    # ==================== 购物车 ====================

    @staticmethod
    def _row_children(row: WebElement, selector) -> List[WebElement]:
        """在单个商品卡片内查询子元素"""
        by, value = to_by(selector.candidates[0])
        if value.startswith("//"):
            value = f".{value}"
        return row.find_elements(by, value)

    def _row_name(self, row: WebElement) -> str:
        titles = self._row_children(row, product_titles)
        if not titles:
            raise ElementNotFoundError("Product card has no title", attempted=product_titles.candidates)
        return titles[0].text

    def click_add_to_cart_button(self) -> None:
        """点击第一个可见的加入购物车按钮"""
        self.click(add_to_cart_buttons)

    def add_product_to_cart_by_index(self, index: int) -> str:
        """
        将第 index 张商品卡片加入购物车，返回其名称

        名称与按钮都取自同一张卡片。

        Raises:
            IndexError: 卡片不存在
            ElementNotFoundError: 该商品已在购物车中（按钮已变为 REMOVE）
        """
        row = self._element_at(self.find_all(product_items), index, "Product")
        name = self._row_name(row)
        buttons = self._row_children(row, add_to_cart_buttons)
        if not buttons:
            raise ElementNotFoundError(f"{name} has no add-to-cart button, already in cart",
                                       attempted=add_to_cart_buttons.candidates)
        buttons[0].click()
        logger.info(f"Added to cart: {name}")
        return name

    def add_random_product_to_cart(self) -> str:
        """从仍可加入的商品中随机选一个加入购物车"""
        rows = self.find_all(product_items)
        addable = [i for i, row in enumerate(rows) if self._row_children(row, add_to_cart_buttons)]
        if not addable:
            raise ElementNotFoundError("No add-to-cart buttons available",
                                       attempted=add_to_cart_buttons.candidates)
        return self.add_product_to_cart_by_index(self.rng.choice(addable))

    def get_cart_count(self) -> int:
        """购物车角标数量（无角标时为 0）"""
        badges = self.find_all(cart_badge)
        if not badges:
            return 0
        digits = re.sub(r"\D", "", badges[0].text or "")
        return int(digits) if digits else 0

    def open_cart(self) -> None:
        self.navigate(cart_icon, "open-cart-failed")

    # ==================== 排序与视图 ====================

    def sort_products(self, order: str) -> None:
        """
        排序商品

        Args:
            order: "az" | "za" | "lohi" | "hilo"
        """
        if order not in sort_options:
            raise ValueError(f"Unknown sort order '{order}', expected one of {sorted(sort_options)}")
        self.click(sort_button)
        self.click(sort_options[order])
        logger.info(f"Sorted products: {order}")

    def is_grid_view_active(self) -> bool:
        """网格视图下同一行有多张卡片，以前两张卡片的纵坐标判断"""
        items = self.find_all(product_items)
        if len(items) < 2:
            return False
        return items[0].location["y"] == items[1].location["y"]

    def toggle_view(self) -> None:
        self.click(toggle_view_button)

    def is_product_listed(self, name: str) -> bool:
        return SelectorHelper.exists(self.driver, product_by_name.formatted(name=name), timeout_ms=0)
