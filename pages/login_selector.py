"""登录页选择器表"""
from utils.selector_helper import Selector

LOGIN_SCREEN = Selector.of(
    "~test-Username",
    '//XCUIElementTypeTextField[@name="Username"]',
    description="登录页（用户名输入框）",
)

username_input = Selector.of(
    "~test-Username",
    '//XCUIElementTypeTextField[@name="Username"]',
    description="用户名输入框",
)

password_input = Selector.of(
    "~test-Password",
    '//XCUIElementTypeSecureTextField[@name="Password"]',
    description="密码输入框",
)

login_button = Selector.of(
    "~test-LOGIN",
    '//XCUIElementTypeOther[@name="LOGIN"]',
    description="登录按钮",
)

error_message = Selector.of(
    '//XCUIElementTypeOther[@name="test-Error message"]/XCUIElementTypeStaticText',
    "~test-Error message",
    description="登录错误提示",
    candidate_timeout_ms=1000,
)
