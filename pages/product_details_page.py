"""
商品详情页面对象
"""
import re
from typing import Dict

from utils.logger import get_logger

from .base_page import BasePage
from .product_details_selector import (
    DETAILS_SCREEN,
    add_to_cart_button,
    back_button,
    product_description,
    product_price,
    product_title,
)
from .products_selector import cart_badge, cart_icon

logger = get_logger(__name__)


class ProductDetailsPage(BasePage):
    """商品详情页"""

    PAGE_IDENTIFIER = DETAILS_SCREEN

    def get_product_title(self) -> str:
        return self.get_text(product_title)

    def get_product_description(self) -> str:
        return self.get_text(product_description)

    def get_product_price(self) -> str:
        return self.get_text(product_price)

    def get_product_details(self) -> Dict[str, str]:
        return {
            "title": self.get_product_title(),
            "description": self.get_product_description(),
            "price": self.get_product_price(),
        }

    def add_to_cart(self) -> None:
        # 按钮位于描述下方，小屏设备需要先滚动
        self.scroll_to(add_to_cart_button)
        self.click(add_to_cart_button)
        logger.info("Added current product to cart")

    def navigate_back(self) -> None:
        self.navigate(back_button, "back-to-products-failed")

    def get_cart_count(self) -> int:
        badges = self.find_all(cart_badge)
        if not badges:
            return 0
        digits = re.sub(r"\D", "", badges[0].text or "")
        return int(digits) if digits else 0

    def open_cart(self) -> None:
        self.navigate(cart_icon, "open-cart-failed")
