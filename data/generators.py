"""
测试数据生成器 - 基于 Faker 构建

所有生成器接受可选 seed；相同 seed 生成相同序列，便于断言结构（长度、格式）。
"""
from dataclasses import fields, replace
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from faker import Faker
from faker.providers import BaseProvider

from .models import Customer, Payment, Product, blank_fields


# ==================== 自定义 Faker Provider ====================

class CheckoutProvider(BaseProvider):
    """结算场景专用 Faker Provider"""

    def test_user_id(self) -> int:
        return self.random_int(0, 9999)

    def test_email(self, user_id: int, domain: str = "example.com") -> str:
        return f"test.user{user_id}@{domain}"

    def test_phone(self, area_code: str = "415") -> str:
        """10 位电话号码"""
        return f"{area_code}{self.numerify('#######')}"

    def test_zip_code(self, prefix: str = "9") -> str:
        """5 位邮编"""
        return prefix + self.numerify("#" * (5 - len(prefix)))


def _build_faker(seed: Optional[int]) -> Faker:
    faker = Faker("en_US")
    faker.add_provider(CheckoutProvider)
    if seed is not None:
        faker.seed_instance(seed)
    return faker


# ==================== 客户数据 ====================

class CustomerDataGenerator:
    """客户信息生成器"""

    def __init__(self, seed: Optional[int] = None):
        self.faker = _build_faker(seed)

    def generate_valid_customer(self) -> Customer:
        """生成字段完整且互相一致的客户信息"""
        user_id = self.faker.test_user_id()
        return Customer(
            first_name=self.faker.first_name(),
            last_name=self.faker.last_name(),
            address=self.faker.street_address(),
            city="San Francisco",
            state="CA",
            zip_code=self.faker.test_zip_code("9"),
            phone=self.faker.test_phone("415"),
            email=self.faker.test_email(user_id),
        )

    def generate_invalid_customer(self, fields_to_omit: Iterable[str]) -> Customer:
        """生成合法客户信息后仅将指定字段置空"""
        return blank_fields(self.generate_valid_customer(), fields_to_omit)


# ==================== 支付数据 ====================

class CardType(str, Enum):
    VISA = "visa"
    MASTERCARD = "mastercard"
    AMEX = "amex"
    DISCOVER = "discover"


# 各卡组织公开的测试卡号
CARD_NUMBERS = {
    CardType.VISA: "4111111111111111",
    CardType.MASTERCARD: "5555555555554444",
    CardType.AMEX: "378282246310005",
    CardType.DISCOVER: "6011111111111117",
}


class PaymentDataGenerator:
    """支付信息生成器"""

    def __init__(self, seed: Optional[int] = None, today: Optional[date] = None):
        self.faker = _build_faker(seed)
        self.today = today or date.today()

    def _expiration_date(self) -> str:
        """MM/YY，年份在 1-5 年之后"""
        month = self.faker.random_int(1, 12)
        year = self.today.year + self.faker.random_int(1, 5)
        return f"{month:02d}/{year % 100:02d}"

    def _cvv(self, card_type: CardType) -> str:
        digits = 4 if card_type is CardType.AMEX else 3
        return self.faker.numerify("#" * digits)

    def generate_valid_payment(self, card_type: "CardType | str" = CardType.VISA) -> Payment:
        """
        按卡类型生成支付信息

        Raises:
            ValueError: 未知卡类型
        """
        card_type = CardType(card_type)
        return Payment(
            card_number=CARD_NUMBERS[card_type],
            expiration_date=self._expiration_date(),
            cvv=self._cvv(card_type),
            card_holder_name=f"Test {card_type.value.upper()} User",
            use_same_address=True,
        )

    def generate_payment_with_different_billing_address(
        self, card_type: "CardType | str" = CardType.VISA
    ) -> Payment:
        return replace(
            self.generate_valid_payment(card_type),
            use_same_address=False,
            billing_address=self.faker.street_address(),
            billing_city="New York",
            billing_state="NY",
            billing_zip_code=self.faker.test_zip_code("10"),
        )

    def generate_invalid_payment(self, fields_to_invalidate: Iterable[str]) -> Payment:
        """指定字段置空；use_same_address 被点名时置为 False"""
        names = list(fields_to_invalidate)
        payment = self.generate_valid_payment()
        known = {f.name for f in fields(payment)}
        unknown = [n for n in names if n not in known]
        if unknown:
            raise ValueError(f"Unknown Payment fields: {unknown}")

        changes = {name: ("" if name != "use_same_address" else False) for name in names}
        return replace(payment, **changes)


# ==================== 商品数据 ====================

class ProductDataGenerator:
    """演示应用商品目录"""

    SAMPLE_PRODUCTS: Tuple[Product, ...] = (
        Product(1, "Sauce Labs Backpack", 29.99,
                "A stylish backpack with convenient side pocket."),
        Product(2, "Sauce Labs Bike Light", 9.99,
                "Water-resistant with 3 lighting modes."),
        Product(3, "Sauce Labs Bolt T-Shirt", 15.99,
                "Get your testing superhero on in this organic cotton bolt shirt."),
        Product(4, "Sauce Labs Fleece Jacket", 49.99,
                "Midweight quarter-zip fleece jacket in multiple colors."),
        Product(5, "Sauce Labs Onesie", 7.99,
                "Rib snap infant onesie for the junior automation engineer."),
        Product(6, "Test.allTheThings() T-Shirt", 15.99,
                "Super-soft ringspun combed cotton shirt with logo."),
    )

    def __init__(self, seed: Optional[int] = None):
        self.faker = _build_faker(seed)

    def get_product(self, product_id: int) -> Optional[Product]:
        return next((p for p in self.SAMPLE_PRODUCTS if p.id == product_id), None)

    def get_random_product(self) -> Product:
        return self.faker.random_element(self.SAMPLE_PRODUCTS)

    def get_all_products(self) -> List[Product]:
        return list(self.SAMPLE_PRODUCTS)
