"""商品列表页选择器表"""
from utils.selector_helper import Selector

PRODUCTS_SCREEN = Selector.of(
    "~test-PRODUCTS",
    '//XCUIElementTypeStaticText[@name="PRODUCTS"]',
    description="商品列表页标题",
)

product_items = Selector.of("~test-Item", description="商品卡片")
product_titles = Selector.of("~test-Item title", description="商品名称")
product_prices = Selector.of("~test-Price", description="商品价格")

add_to_cart_buttons = Selector.of("~test-ADD TO CART", description="加入购物车按钮")

cart_icon = Selector.of("~test-Cart", description="购物车入口")
cart_badge = Selector.of(
    '//XCUIElementTypeOther[@name="test-Cart"]//XCUIElementTypeStaticText',
    description="购物车角标",
    candidate_timeout_ms=500,
)

sort_button = Selector.of("~test-Modal Selector Button", description="排序按钮")
toggle_view_button = Selector.of("~test-Toggle", description="列表/网格切换")

# 按名称定位单个商品，使用 formatted(name=...) 填充
product_by_name = Selector.of(
    "~{name}",
    '//*[@name="test-Item title" and @label="{name}"]',
    '//XCUIElementTypeStaticText[@label="{name}"]',
    description="商品 {name}",
)

# 排序选项，键与 ProductsPage.sort_products 的参数一致
sort_options = {
    "az": Selector.of("~test-ASCENDING", '//XCUIElementTypeOther[@name="Name (A to Z)"]',
                      description="排序: 名称 A-Z"),
    "za": Selector.of("~test-DESCENDING", '//XCUIElementTypeOther[@name="Name (Z to A)"]',
                      description="排序: 名称 Z-A"),
    "lohi": Selector.of("~test-LOHI", '//XCUIElementTypeOther[@name="Price (low to high)"]',
                        description="排序: 价格升序"),
    "hilo": Selector.of("~test-HILO", '//XCUIElementTypeOther[@name="Price (high to low)"]',
                        description="排序: 价格降序"),
}
