"""
购物车页面对象

校验类方法每次都重新查询元素树，不缓存之前读取的结果。
"""
from typing import Iterable, List

from selenium.webdriver.remote.webelement import WebElement

from utils.logger import get_logger
from utils.selector_helper import ElementNotFoundError, to_by

from .base_page import BasePage
from .cart_selector import (
    CART_SCREEN,
    cart_items,
    checkout_button,
    continue_shopping_button,
    item_price,
    item_title,
    remove_buttons,
    remove_by_name,
)
from .products_selector import cart_icon

logger = get_logger(__name__)


class CartPage(BasePage):
    """购物车页"""

    PAGE_IDENTIFIER = CART_SCREEN

    def open(self) -> None:
        """从任意带购物车图标的页面进入购物车"""
        self.navigate(cart_icon, "open-cart-failed")
        self.wait_for_page_to_load()

    # ==================== 查询 ====================

    def get_cart_items(self) -> List[WebElement]:
        return self.find_all(cart_items)

    def get_item_count(self) -> int:
        return len(self.get_cart_items())

    def is_cart_empty(self) -> bool:
        return self.get_item_count() == 0

    def _item_at(self, index: int) -> WebElement:
        items = self.get_cart_items()
        if not 0 <= index < len(items):
            raise IndexError(f"Cart item index {index} out of range (cart has {len(items)} items)")
        return items[index]

    @staticmethod
    def _child_text(row: WebElement, selector) -> str:
        by, value = to_by(selector.candidates[0])
        # 行内查询需要相对 XPath
        if value.startswith("//"):
            value = f".{value}"
        return row.find_element(by, value).text or ""

    def get_item_name(self, index: int) -> str:
        return self._child_text(self._item_at(index), item_title)

    def get_item_price(self, index: int) -> str:
        return self._child_text(self._item_at(index), item_price)

    def get_item_names(self) -> List[str]:
        return [self._child_text(row, item_title) for row in self.get_cart_items()]

    # ==================== 校验 ====================

    def is_product_in_cart(self, name: str) -> bool:
        return name in self.get_item_names()

    def verify_cart_contents(self, expected_names: Iterable[str]) -> bool:
        """购物车中的商品名称集合与期望完全一致（忽略顺序）"""
        expected = sorted(expected_names)
        actual = sorted(self.get_item_names())
        if actual != expected:
            logger.warning(f"Cart contents mismatch: expected {expected}, got {actual}")
            return False
        return True

    # ==================== 操作 ====================

    def remove_item(self, index: int) -> None:
        buttons = self.find_all(remove_buttons)
        if not 0 <= index < len(buttons):
            raise IndexError(f"Remove button index {index} out of range ({len(buttons)} found)")
        buttons[index].click()

    def remove_product(self, name: str) -> None:
        """
        按名称移除商品

        Raises:
            ElementNotFoundError: 购物车中没有该商品
        """
        if not self.is_product_in_cart(name):
            raise ElementNotFoundError(f"Product '{name}' is not in the cart",
                                       attempted=remove_by_name.formatted(name=name).candidates)
        self.click(remove_by_name.formatted(name=name))
        logger.info(f"Removed from cart: {name}")

    def proceed_to_checkout(self) -> None:
        self.scroll_to(checkout_button)
        self.navigate(checkout_button, "checkout-from-cart-failed")

    def continue_shopping(self) -> None:
        self.scroll_to(continue_shopping_button)
        self.navigate(continue_shopping_button, "continue-shopping-failed")
