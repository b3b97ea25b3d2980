"""
下单完成页面对象
"""
from typing import Optional

from data.models import OrderConfirmation
from utils.logger import get_logger
from utils.selector_helper import Selector

from .base_page import BasePage
from .confirmation_selector import (
    CONFIRMATION_SCREEN,
    back_home_button,
    confirmation_header,
    confirmation_message,
    delivery_date,
    order_date,
    order_number,
    order_total,
)

logger = get_logger(__name__)

SUCCESS_MARKERS = ("thank you", "success")


class OrderConfirmationPage(BasePage):
    """下单完成页"""

    PAGE_IDENTIFIER = CONFIRMATION_SCREEN

    def is_confirmation_displayed(self, timeout: Optional[int] = None) -> bool:
        return self.is_displayed(CONFIRMATION_SCREEN, timeout=timeout or 0)

    def get_confirmation_header(self) -> str:
        return self.get_text(confirmation_header)

    def get_confirmation_message(self) -> str:
        return self.get_text(confirmation_message)

    def is_order_successful(self) -> bool:
        """标题或说明中包含 'thank you' / 'success'（忽略大小写）"""
        texts = []
        for selector in (confirmation_header, confirmation_message):
            if self.is_displayed(selector):
                texts.append(self.get_text(selector).lower())
        return any(marker in text for text in texts for marker in SUCCESS_MARKERS)

    def _optional_text(self, selector: Selector) -> str:
        if not self.exists(selector):
            return ""
        return self.get_text(selector)

    def get_order_confirmation(self, order_total_text: str = "") -> OrderConfirmation:
        """
        读取订单确认信息

        演示应用不展示订单号、日期等字段，缺失时为空字符串；
        order_total_text 为概览页读取的合计，屏幕上没有金额时使用。
        """
        confirmation = OrderConfirmation(
            order_number=self._optional_text(order_number),
            order_date=self._optional_text(order_date),
            order_total=self._optional_text(order_total) or order_total_text,
            delivery_date=self._optional_text(delivery_date),
        )
        logger.info(f"Order confirmation: {confirmation.to_dict()}")
        return confirmation

    def back_to_home(self) -> None:
        self.navigate(back_home_button, "back-home-failed")
