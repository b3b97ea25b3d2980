"""结算信息页与结算概览页选择器表"""
from utils.selector_helper import Selector

# ==================== 结算信息 ====================

CHECKOUT_INFO_SCREEN = Selector.of(
    "~test-CHECKOUT: YOUR INFORMATION",
    '//XCUIElementTypeStaticText[@name="CHECKOUT: INFORMATION"]',
    "~test-First Name",
    description="结算信息页",
)

first_name_input = Selector.of("~test-First Name", description="名")
last_name_input = Selector.of("~test-Last Name", description="姓")
postal_code_input = Selector.of("~test-Zip/Postal Code", description="邮编")

# 演示应用只收集姓名与邮编，以下字段存在时才填写
address_input = Selector.of("~test-Address", description="地址")
city_input = Selector.of("~test-City", description="城市")
state_input = Selector.of("~test-State", description="州")
phone_input = Selector.of("~test-Phone", description="电话")
email_input = Selector.of("~test-Email", description="邮箱")

continue_button = Selector.of("~test-CONTINUE", description="继续按钮")
cancel_button = Selector.of("~test-CANCEL", description="取消按钮")
error_message = Selector.of(
    '//XCUIElementTypeOther[@name="test-Error message"]/XCUIElementTypeStaticText',
    "~test-Error message",
    description="表单错误提示",
    candidate_timeout_ms=1000,
)

# ==================== 结算概览 ====================

OVERVIEW_SCREEN = Selector.of(
    "~test-CHECKOUT: OVERVIEW",
    '//XCUIElementTypeStaticText[@name="CHECKOUT: OVERVIEW"]',
    description="结算概览页",
)

overview_items = Selector.of("~test-Item", description="概览商品行")
payment_info = Selector.of(
    '//XCUIElementTypeStaticText[@name="Payment Information:"]/following-sibling::XCUIElementTypeStaticText[1]',
    "~test-Payment Information:",
    description="支付信息",
)
shipping_info = Selector.of(
    '//XCUIElementTypeStaticText[@name="Shipping Information:"]/following-sibling::XCUIElementTypeStaticText[1]',
    "~test-Shipping Information:",
    description="配送信息",
)
item_total = Selector.of(
    '-ios predicate string:label BEGINSWITH "Item total:"',
    "~test-Item total:",
    description="商品小计",
)
tax = Selector.of('-ios predicate string:label BEGINSWITH "Tax:"', "~test-Tax:", description="税费")
total = Selector.of('-ios predicate string:label BEGINSWITH "Total:"', "~test-Total:", description="合计")

finish_button = Selector.of("~test-FINISH", description="完成下单按钮")
overview_cancel_button = Selector.of("~test-CANCEL", description="取消按钮")
