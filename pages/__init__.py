from .base_page import BasePage, PageNotLoadedError
from .cart_page import CartPage
from .checkout_info_page import CheckoutInfoPage
from .login_page import LoginPage
from .order_confirmation_page import OrderConfirmationPage
from .order_summary_page import OrderSummaryPage
from .payment_details_page import (
    AcceptingPaymentResponder,
    FakePaymentResponder,
    PaymentDetailsPage,
    PaymentResponder,
)
from .product_details_page import ProductDetailsPage
from .products_page import ProductsPage

__all__ = [
    "BasePage",
    "PageNotLoadedError",
    "LoginPage",
    "ProductsPage",
    "ProductDetailsPage",
    "CartPage",
    "CheckoutInfoPage",
    "OrderSummaryPage",
    "PaymentDetailsPage",
    "PaymentResponder",
    "AcceptingPaymentResponder",
    "FakePaymentResponder",
    "OrderConfirmationPage",
]
