"""购物车页选择器表"""
from utils.selector_helper import Selector

CART_SCREEN = Selector.of(
    "~test-Cart Content",
    '//XCUIElementTypeStaticText[@name="YOUR CART"]',
    description="购物车页",
)

cart_items = Selector.of("~test-Item", "~cart-item", description="购物车商品行")

# 相对于单个商品行查询
item_title = Selector.of(
    '//XCUIElementTypeOther[@name="test-Description"]/XCUIElementTypeStaticText[1]',
    description="商品行名称",
)
item_price = Selector.of(
    '//XCUIElementTypeOther[@name="test-Price"]/XCUIElementTypeStaticText',
    description="商品行价格",
)

remove_buttons = Selector.of("~test-REMOVE", description="移除按钮")
remove_by_name = Selector.of(
    '//XCUIElementTypeStaticText[@label="{name}"]/ancestor::XCUIElementTypeOther[@name="test-Item"]'
    '//XCUIElementTypeOther[@name="test-REMOVE"]',
    description="移除 {name}",
)

checkout_button = Selector.of("~test-CHECKOUT", description="结算按钮")
continue_shopping_button = Selector.of("~test-CONTINUE SHOPPING", description="继续购物按钮")
