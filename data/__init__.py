from .generators import CardType, CustomerDataGenerator, PaymentDataGenerator, ProductDataGenerator
from .models import Customer, OrderConfirmation, OrderSummary, Payment, Product
from .providers import CheckoutData, CheckoutDataProvider, CheckoutTestCase
from .state import TestStateManager

__all__ = [
    "CardType",
    "CheckoutData",
    "CheckoutDataProvider",
    "CheckoutTestCase",
    "Customer",
    "CustomerDataGenerator",
    "OrderConfirmation",
    "OrderSummary",
    "Payment",
    "PaymentDataGenerator",
    "Product",
    "ProductDataGenerator",
    "TestStateManager",
]
