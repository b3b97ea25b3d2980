from unittest.mock import Mock, patch

import pytest
from appium.webdriver.common.appiumby import AppiumBy
from selenium.common.exceptions import InvalidSessionIdException
from urllib3.exceptions import MaxRetryError

from utils.selector_helper import (
    ElementNotFoundError,
    InvalidLocatorError,
    Selector,
    SelectorHelper,
    as_selector,
    to_by,
)
from utils.session import SessionError


def make_element(displayed=True, text=""):
    element = Mock()
    element.is_displayed.return_value = displayed
    element.text = text
    return element


class FakeDriver:
    """按 (strategy, value) 返回预设元素列表，并记录查询顺序"""

    def __init__(self, tree=None):
        self.tree = tree or {}
        self.queries = []

    def find_elements(self, by, value):
        self.queries.append((by, value))
        return list(self.tree.get((by, value), []))


@pytest.fixture(autouse=True)
def no_allure():
    with patch("utils.selector_helper._attach_to_allure") as attach:
        yield attach


# ==================== 定位串解析 ====================
@pytest.mark.parametrize("locator, expected", [
    ("~test-LOGIN", (AppiumBy.ACCESSIBILITY_ID, "test-LOGIN")),
    ('//XCUIElementTypeButton[@name="x"]', (AppiumBy.XPATH, '//XCUIElementTypeButton[@name="x"]')),
    ("(//XCUIElementTypeCell)[2]", (AppiumBy.XPATH, "(//XCUIElementTypeCell)[2]")),
    ('-ios predicate string:label == "Total"', (AppiumBy.IOS_PREDICATE, 'label == "Total"')),
    ("-ios class chain:**/XCUIElementTypeCell", (AppiumBy.IOS_CLASS_CHAIN, "**/XCUIElementTypeCell")),
    ("id=cart", (AppiumBy.ID, "cart")),
])
def test_to_by(locator, expected):
    assert to_by(locator) == expected


def test_unknown_locator_form_rejected():
    with pytest.raises(InvalidLocatorError) as exc_info:
        to_by("button.login")
    assert exc_info.value.locator == "button.login"


def test_selector_validates_candidates_on_construction():
    with pytest.raises(InvalidLocatorError):
        Selector.of("~ok", "not a locator")
    with pytest.raises(ValueError):
        Selector(())


def test_selector_formatted_fills_every_candidate():
    sel = Selector.of('~{name}', '//X[@label="{name}"]', description="product {name}")
    filled = sel.formatted(name="Sauce Labs Onesie")
    assert filled.candidates == ("~Sauce Labs Onesie", '//X[@label="Sauce Labs Onesie"]')
    assert filled.description == "product Sauce Labs Onesie"
    assert sel.candidates[0] == "~{name}"


def test_as_selector_wraps_plain_string():
    assert as_selector("~cart").candidates == ("~cart",)


# ==================== 解析顺序与回退 ====================
def test_first_matching_candidate_wins():
    target = make_element()
    driver = FakeDriver({(AppiumBy.ACCESSIBILITY_ID, "b"): [target],
                         (AppiumBy.ACCESSIBILITY_ID, "c"): [make_element()]})

    element, info = SelectorHelper.resolve(driver, Selector.of("~a", "~b", "~c"), candidate_timeout_ms=0)

    assert element is target
    assert info.locator == "~b"
    assert info.strategy == AppiumBy.ACCESSIBILITY_ID
    assert [a["success"] for a in info.attempts] == [False, True]
    # 第三个候选不会被查询
    assert (AppiumBy.ACCESSIBILITY_ID, "c") not in driver.queries


def test_displayed_state_skips_hidden_elements():
    hidden, visible = make_element(displayed=False), make_element()
    driver = FakeDriver({(AppiumBy.ACCESSIBILITY_ID, "row"): [hidden, visible]})

    assert SelectorHelper.find(driver, "~row", candidate_timeout_ms=0) is visible
    assert SelectorHelper.find(driver, "~row", state="exists", candidate_timeout_ms=0) is hidden


def test_not_found_names_every_attempted_candidate(no_allure):
    driver = FakeDriver()
    with pytest.raises(ElementNotFoundError) as exc_info:
        SelectorHelper.resolve(driver, Selector.of("~a", "//b"), candidate_timeout_ms=0)

    err = exc_info.value
    assert err.attempted == ("~a", "//b")
    assert "~a" in str(err) and "//b" in str(err)
    assert len(err.attempts) == 2
    no_allure.assert_called_once()


def test_lost_session_raises_session_error():
    driver = Mock()
    driver.find_elements.side_effect = InvalidSessionIdException("gone")
    with pytest.raises(SessionError):
        SelectorHelper.resolve(driver, "~a", candidate_timeout_ms=0)


@pytest.mark.parametrize("error", [
    MaxRetryError(None, "/session/abc/elements"),
    ConnectionRefusedError("Connection refused"),
])
def test_unreachable_server_raises_session_error_without_waiting(error):
    driver = Mock()
    driver.find_elements.side_effect = error
    with pytest.raises(SessionError) as exc_info:
        SelectorHelper.resolve(driver, Selector.of("~a", "~b"), candidate_timeout_ms=5000)
    assert exc_info.value.__cause__ is error
    driver.find_elements.assert_called_once()


def test_find_all_raises_session_error_when_server_gone():
    driver = Mock()
    driver.find_elements.side_effect = MaxRetryError(None, "/session/abc/elements")
    with pytest.raises(SessionError):
        SelectorHelper.find_all(driver, "~a")


def test_find_all_returns_first_non_empty_candidate():
    rows = [make_element(), make_element()]
    driver = FakeDriver({(AppiumBy.XPATH, "//row"): rows})
    assert SelectorHelper.find_all(driver, Selector.of("~missing", "//row")) == rows
    assert SelectorHelper.find_all(driver, "~missing") == []


def test_exists():
    driver = FakeDriver({(AppiumBy.ACCESSIBILITY_ID, "here"): [make_element(displayed=False)]})
    assert SelectorHelper.exists(driver, "~here", timeout_ms=0)
    assert not SelectorHelper.exists(driver, "~here", timeout_ms=0, state="displayed")
    assert not SelectorHelper.exists(driver, "~gone", timeout_ms=0)
