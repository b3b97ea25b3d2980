"""
测试运行状态上下文

每个测试由 fixture 显式创建一个 TestStateManager，在步骤之间共享当前
商品、客户、支付与订单结果；测试结束时 reset_state()。不是进程级单例，
并行 worker 之间互不影响。
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .models import Customer, OrderConfirmation, OrderSummary, Payment, Product


class TestStateManager:
    """单次测试运行的可变状态（后写覆盖，不做校验）"""

    __test__ = False  # 防止 pytest 当作测试类收集

    def __init__(self):
        self.reset_state()

    # ==================== 生命周期 ====================

    def init_test(self, test_id: str) -> None:
        """清空旧状态并开始新的测试运行"""
        self.reset_state()
        self._test_id = test_id
        self._test_start_time = datetime.now(timezone.utc)

    def reset_state(self) -> None:
        self._current_product: Optional[Product] = None
        self._current_customer: Optional[Customer] = None
        self._current_payment: Optional[Payment] = None
        self._order_summary: Optional[OrderSummary] = None
        self._order_confirmation: Optional[OrderConfirmation] = None
        self._product_list: List[Product] = []
        self._test_id = ""
        self._test_start_time: Optional[datetime] = None
        self._custom_data: Dict[str, Any] = {}

    # ==================== 夹具槽位 ====================

    def set_current_product(self, product: Optional[Product]) -> None:
        self._current_product = product

    def get_current_product(self) -> Optional[Product]:
        return self._current_product

    def set_current_customer(self, customer: Optional[Customer]) -> None:
        self._current_customer = customer

    def get_current_customer(self) -> Optional[Customer]:
        return self._current_customer

    def set_current_payment(self, payment: Optional[Payment]) -> None:
        self._current_payment = payment

    def get_current_payment(self) -> Optional[Payment]:
        return self._current_payment

    def set_order_summary(self, summary: Optional[OrderSummary]) -> None:
        self._order_summary = summary

    def get_order_summary(self) -> Optional[OrderSummary]:
        return self._order_summary

    def set_order_confirmation(self, confirmation: Optional[OrderConfirmation]) -> None:
        self._order_confirmation = confirmation

    def get_order_confirmation(self) -> Optional[OrderConfirmation]:
        return self._order_confirmation

    def add_product_to_list(self, product: Product) -> None:
        """记录加入购物车的商品，供后续步骤核对"""
        self._product_list.append(product)

    def get_product_list(self) -> List[Product]:
        return list(self._product_list)

    # ==================== 自定义数据 ====================

    def set_custom_data(self, key: str, value: Any) -> None:
        self._custom_data[key] = value

    def get_custom_data(self, key: str, default: Any = None) -> Any:
        return self._custom_data.get(key, default)

    # ==================== 元数据 ====================

    @property
    def test_id(self) -> str:
        return self._test_id

    def get_test_metadata(self) -> Dict[str, Any]:
        duration_ms = None
        if self._test_start_time is not None:
            elapsed = datetime.now(timezone.utc) - self._test_start_time
            duration_ms = int(elapsed.total_seconds() * 1000)
        return {
            "test_id": self._test_id,
            "start_time": self._test_start_time,
            "duration_ms": duration_ms,
        }
