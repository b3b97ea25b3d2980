"""结算场景数据组合"""
from dataclasses import dataclass, field
from typing import List, Optional

from .generators import CardType, CustomerDataGenerator, PaymentDataGenerator, ProductDataGenerator
from .models import Customer, Payment, Product


@dataclass(frozen=True)
class CheckoutData:
    customer: Customer
    payment: Payment
    products: List[Product] = field(default_factory=list)


@dataclass(frozen=True)
class CheckoutTestCase:
    description: str
    customer: Customer
    payment: Payment
    product: Product
    missing_field: Optional[str] = None


class CheckoutDataProvider:
    """为结算场景组合客户、支付与商品数据"""

    def __init__(self, seed: Optional[int] = None):
        self.customers = CustomerDataGenerator(seed)
        self.payments = PaymentDataGenerator(seed)
        self.products = ProductDataGenerator(seed)

    def _product(self, product_id: int) -> Product:
        product = self.products.get_product(product_id)
        if product is None:
            raise LookupError(f"Product {product_id} is not in the catalogue")
        return product

    def happy_path_data(self) -> CheckoutData:
        return CheckoutData(
            customer=self.customers.generate_valid_customer(),
            payment=self.payments.generate_valid_payment(CardType.VISA),
            products=[self._product(1)],
        )

    def multiple_items_data(self) -> CheckoutData:
        return CheckoutData(
            customer=self.customers.generate_valid_customer(),
            payment=self.payments.generate_valid_payment(CardType.VISA),
            products=self.products.get_all_products()[:3],
        )

    def checkout_test_cases(self) -> List[CheckoutTestCase]:
        valid = self.customers.generate_valid_customer
        return [
            CheckoutTestCase("Standard checkout with Visa", valid(),
                             self.payments.generate_valid_payment(CardType.VISA), self._product(1)),
            CheckoutTestCase("Checkout with different billing address", valid(),
                             self.payments.generate_payment_with_different_billing_address(),
                             self._product(2)),
            CheckoutTestCase("Checkout with Mastercard", valid(),
                             self.payments.generate_valid_payment(CardType.MASTERCARD), self._product(3)),
            CheckoutTestCase("Checkout with American Express", valid(),
                             self.payments.generate_valid_payment(CardType.AMEX), self._product(4)),
            CheckoutTestCase("Checkout with Discover", valid(),
                             self.payments.generate_valid_payment(CardType.DISCOVER), self._product(5)),
        ]

    def invalid_checkout_test_cases(self) -> List[CheckoutTestCase]:
        valid_payment = self.payments.generate_valid_payment
        product = self._product(1)
        return [
            CheckoutTestCase("Missing first name",
                             self.customers.generate_invalid_customer(["first_name"]),
                             valid_payment(), product, missing_field="first_name"),
            CheckoutTestCase("Missing email",
                             self.customers.generate_invalid_customer(["email"]),
                             valid_payment(), product, missing_field="email"),
            CheckoutTestCase("Missing card number",
                             self.customers.generate_valid_customer(),
                             self.payments.generate_invalid_payment(["card_number"]),
                             product, missing_field="card_number"),
            CheckoutTestCase("Missing CVV",
                             self.customers.generate_valid_customer(),
                             self.payments.generate_invalid_payment(["cvv"]),
                             product, missing_field="cvv"),
        ]
