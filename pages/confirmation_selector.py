"""下单完成页选择器表"""
from utils.selector_helper import Selector

CONFIRMATION_SCREEN = Selector.of(
    "~test-CHECKOUT: COMPLETE!",
    '//XCUIElementTypeStaticText[@name="CHECKOUT: COMPLETE!"]',
    description="下单完成页",
)

confirmation_header = Selector.of(
    '-ios predicate string:label BEGINSWITH[c] "THANK YOU"',
    description="感谢标题",
)
confirmation_message = Selector.of(
    '-ios predicate string:label CONTAINS[c] "dispatched"',
    "~confirmation-message",
    description="下单成功说明",
)

# 演示应用不展示以下信息，存在时读取
order_number = Selector.of("~order-number", description="订单号", candidate_timeout_ms=500)
order_date = Selector.of("~order-date", description="下单日期", candidate_timeout_ms=500)
order_total = Selector.of("~order-total", description="订单金额", candidate_timeout_ms=500)
delivery_date = Selector.of("~delivery-date", description="送达日期", candidate_timeout_ms=500)

back_home_button = Selector.of("~test-BACK HOME", "~continue-shopping", description="返回首页按钮")
