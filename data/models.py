"""测试夹具数据模型（不可变值对象）"""
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Iterable, Optional, TypeVar

M = TypeVar("M")


def blank_fields(record: M, names: Iterable[str]) -> M:
    """
    返回指定字段置空后的副本，其余字段保持不变

    Raises:
        ValueError: 字段名不属于该模型
    """
    names = list(names)
    known = {f.name for f in fields(record)}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown {type(record).__name__} fields: {unknown}")
    return replace(record, **{name: "" for name in names})


@dataclass(frozen=True)
class Customer:
    first_name: str
    last_name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str
    email: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Payment:
    card_number: str
    expiration_date: str
    cvv: str
    card_holder_name: str
    use_same_address: bool = True
    billing_address: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_zip_code: Optional[str] = None

    @property
    def last_four(self) -> str:
        return self.card_number[-4:]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Product:
    id: int
    name: str
    price: float
    description: str

    @property
    def price_label(self) -> str:
        """界面上展示的价格文本，如 $29.99"""
        return f"${self.price:.2f}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OrderSummary:
    """结算概览页读取到的金额（保持界面原文）"""
    subtotal: str
    tax: str
    shipping: str
    total: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OrderConfirmation:
    order_number: str
    order_date: str
    order_total: str
    delivery_date: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
