"""
结算信息页面对象

演示应用的表单只有姓名与邮编；地址、城市、州、电话、邮箱输入框
只在屏幕上存在时才填写。
"""
from typing import Tuple

from data.models import Customer
from utils.logger import get_logger, log_step
from utils.selector_helper import Selector

from .base_page import BasePage
from .checkout_selector import (
    CHECKOUT_INFO_SCREEN,
    address_input,
    cancel_button,
    city_input,
    continue_button,
    email_input,
    error_message,
    first_name_input,
    last_name_input,
    phone_input,
    postal_code_input,
    state_input,
)

logger = get_logger(__name__)

# (选择器, Customer 字段名)
OPTIONAL_FIELDS: Tuple[Tuple[Selector, str], ...] = (
    (address_input, "address"),
    (city_input, "city"),
    (state_input, "state"),
    (phone_input, "phone"),
    (email_input, "email"),
)


class CheckoutInfoPage(BasePage):
    """结算信息页"""

    PAGE_IDENTIFIER = CHECKOUT_INFO_SCREEN

    def set_first_name(self, value: str) -> None:
        self.set_text(first_name_input, value)

    def set_last_name(self, value: str) -> None:
        self.set_text(last_name_input, value)

    def set_postal_code(self, value: str) -> None:
        self.set_text(postal_code_input, value)

    @log_step("Fill checkout information")
    def fill_checkout_info(self, customer: Customer) -> None:
        """
        填写结算表单

        Args:
            customer: 客户数据；空字符串字段照常写入（用于表单校验场景）
        """
        self.set_first_name(customer.first_name)
        self.set_last_name(customer.last_name)
        self.set_postal_code(customer.zip_code)

        for selector, field_name in OPTIONAL_FIELDS:
            if self.exists(selector):
                self.set_text(selector, getattr(customer, field_name))
            else:
                logger.debug(f"Skipping {field_name}: input not present on screen")

    def continue_to_payment(self) -> None:
        self.scroll_to(continue_button)
        self.navigate(continue_button, "checkout-continue-failed")

    def fill_and_continue(self, customer: Customer) -> None:
        self.fill_checkout_info(customer)
        self.continue_to_payment()

    def cancel(self) -> None:
        self.navigate(cancel_button, "checkout-cancel-failed")

    def is_error_message_displayed(self, timeout: int = 1000) -> bool:
        return self.is_displayed(error_message, timeout=timeout)

    def get_error_message(self) -> str:
        """返回表单错误提示；没有错误时返回空字符串"""
        if not self.is_error_message_displayed():
            return ""
        return self.get_text(error_message)
