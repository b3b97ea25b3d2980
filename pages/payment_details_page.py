"""
支付详情页面对象

演示应用没有独立的支付表单：填写客户信息后直接进入结算概览页。
因此本页与 OrderSummaryPage 指向同一屏幕，支付结果由可注入的
PaymentResponder 决定。

注意：PaymentResponder 只是支付后端的占位替身，不代表真实业务规则。
"""
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol

from data.models import Payment
from utils.logger import get_logger, log_step, mask_sensitive_data

from .order_summary_page import OrderSummaryPage

logger = get_logger(__name__)

SERVER_ERROR_MESSAGE = "Server error processing payment"


# ==================== 支付应答 ====================

class PaymentResponder(Protocol):
    """根据卡号决定支付是否被拒；返回错误文本，接受时返回 None"""

    def respond(self, card_number: str) -> Optional[str]:
        ...


class AcceptingPaymentResponder:
    """默认应答：始终接受"""

    def respond(self, card_number: str) -> Optional[str]:
        return None


@dataclass
class FakePaymentResponder:
    """
    测试替身：拒绝配置中的卡号

    占位实现，用于在没有支付后端的演示应用上演练错误处理路径。
    """
    rejected_cards: FrozenSet[str] = field(default_factory=frozenset)
    error_message: str = SERVER_ERROR_MESSAGE

    @classmethod
    def rejecting(cls, *card_numbers: str, error_message: str = SERVER_ERROR_MESSAGE) -> "FakePaymentResponder":
        return cls(frozenset(card_numbers), error_message)

    def respond(self, card_number: str) -> Optional[str]:
        if card_number in self.rejected_cards:
            return self.error_message
        return None


# ==================== 页面对象 ====================

class PaymentDetailsPage(OrderSummaryPage):
    """结算概览屏幕上的支付步骤"""

    def __init__(self, driver, settings=None, screenshot_helper=None,
                 responder: Optional[PaymentResponder] = None):
        super().__init__(driver, settings, screenshot_helper)
        self.responder = responder or AcceptingPaymentResponder()
        self._card_number = ""
        self._error_message = ""

    def set_card_number(self, card_number: str) -> None:
        """记录卡号；屏幕上没有卡号输入框"""
        logger.info(f"Using card number {mask_sensitive_data(card_number)}")
        self._card_number = card_number

    def continue_to_order_summary(self) -> None:
        """
        提交支付：应答方拒绝时记录错误并停留在当前屏幕，否则完成下单
        """
        error = self.responder.respond(self._card_number)
        if error:
            logger.warning(f"Payment rejected: {error}")
            self._error_message = error
            return
        self._error_message = ""
        self.place_order()

    @log_step("Review payment")
    def fill_and_review(self, payment: Payment) -> None:
        self.wait_for_page_to_load()
        self.set_card_number(payment.card_number)
        self.continue_to_order_summary()

    def is_error_message_displayed(self) -> bool:
        return self._error_message != ""

    def get_error_message(self) -> str:
        return self._error_message
