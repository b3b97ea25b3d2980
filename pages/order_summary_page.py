"""
结算概览页面对象（Checkout: Overview）
"""
from typing import Mapping, Optional, Union

from data.models import OrderSummary
from utils.logger import get_logger, log_step

from .base_page import BasePage
from .checkout_selector import (
    OVERVIEW_SCREEN,
    finish_button,
    item_total,
    overview_cancel_button,
    overview_items,
    payment_info,
    shipping_info,
    tax,
    total,
)

logger = get_logger(__name__)

# 演示应用固定的配送方式文案
DEFAULT_SHIPPING = "FREE PONY EXPRESS DELIVERY!"


class OrderSummaryPage(BasePage):
    """结算概览页：金额、支付与配送信息，完成下单"""

    PAGE_IDENTIFIER = OVERVIEW_SCREEN

    # ==================== 读取 ====================

    def get_item_total(self) -> str:
        return self.get_text(item_total)

    def get_tax(self) -> str:
        return self.get_text(tax)

    def get_total(self) -> str:
        # 合计在商品列表下方
        self.scroll_to(total)
        return self.get_text(total)

    def get_payment_info(self) -> str:
        return self.get_text(payment_info)

    def get_shipping_info(self) -> str:
        return self.get_text(shipping_info)

    def get_item_count(self) -> int:
        return len(self.find_all(overview_items))

    def extract_order_summary(self) -> OrderSummary:
        """读取当前屏幕上的订单金额"""
        shipping = DEFAULT_SHIPPING
        if self.is_displayed(shipping_info):
            shipping = self.get_shipping_info() or DEFAULT_SHIPPING

        summary = OrderSummary(
            subtotal=self.get_item_total(),
            tax=self.get_tax(),
            shipping=shipping,
            total=self.get_total(),
        )
        logger.info(f"Order summary: {summary.to_dict()}")
        return summary

    def verify_order_info(self, expected: Union[OrderSummary, Mapping[str, Optional[str]]]) -> bool:
        """
        核对金额：给出的每个字段都必须是屏幕文本的子串，未给出或为空的字段跳过
        """
        if isinstance(expected, OrderSummary):
            expected = expected.to_dict()

        readers = {
            "subtotal": self.get_item_total,
            "tax": self.get_tax,
            "total": self.get_total,
        }
        for field_name, read in readers.items():
            want = expected.get(field_name)
            if not want:
                continue
            actual = read()
            if want not in actual:
                logger.warning(f"Order {field_name} mismatch: expected '{want}' in '{actual}'")
                return False
        return True

    # ==================== 操作 ====================

    @log_step("Place order")
    def place_order(self) -> None:
        self.scroll_to(finish_button)
        self.navigate(finish_button, "place-order-failed")

    def go_back(self) -> None:
        self.scroll_to(overview_cancel_button)
        self.navigate(overview_cancel_button, "overview-cancel-failed")
