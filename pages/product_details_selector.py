"""商品详情页选择器表"""
from utils.selector_helper import Selector

DETAILS_SCREEN = Selector.of(
    "~test-Inventory item page",
    "~test-BACK TO PRODUCTS",
    description="商品详情页",
)

product_title = Selector.of(
    '//XCUIElementTypeOther[@name="test-Description"]/XCUIElementTypeStaticText[1]',
    "~test-Item title",
    description="商品名称",
)

product_description = Selector.of(
    '//XCUIElementTypeOther[@name="test-Description"]/XCUIElementTypeStaticText[2]',
    "~test-Item description",
    description="商品描述",
)

product_price = Selector.of("~test-Price", description="商品价格")
add_to_cart_button = Selector.of("~test-ADD TO CART", description="加入购物车按钮")
remove_button = Selector.of("~test-REMOVE", description="移出购物车按钮")
back_button = Selector.of("~test-BACK TO PRODUCTS", description="返回商品列表")
