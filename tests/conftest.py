import os
import re
import sys
import warnings
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

from config import PROJECT_ROOT, ConfigManager
from data import CheckoutDataProvider, TestStateManager
from pages import (
    CartPage,
    CheckoutInfoPage,
    LoginPage,
    OrderConfirmationPage,
    OrderSummaryPage,
    PaymentDetailsPage,
    ProductDetailsPage,
    ProductsPage,
)
from utils.logger import get_logger
from utils.screenshot_helper import ScreenshotHelper
from utils.session import create_driver, quit_driver
from utils.yaml_cases_loader import InvalidYamlFormatError, load_yaml_cases

logger = get_logger(__name__)

TEST_DATA_DIR = PROJECT_ROOT / "test_data"


# ==================== 命令行选项与 e2e 开关 ====================
def pytest_addoption(parser):
    parser.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="运行需要 Appium 服务与模拟器的 e2e 用例（也可设置 RUN_E2E=1）",
    )


def _e2e_enabled(config) -> bool:
    return config.getoption("--run-e2e") or os.getenv("RUN_E2E", "").lower() in ("1", "true", "yes")


def pytest_collection_modifyitems(config, items):
    if _e2e_enabled(config):
        return
    skip_e2e = pytest.mark.skip(reason="e2e 用例需要 --run-e2e 或 RUN_E2E=1")
    for item in items:
        if "e2e" in item.keywords:
            item.add_marker(skip_e2e)


# ==================== YAML 用例加载（带缓存） ====================
@lru_cache(maxsize=128)
def _cached_load_yaml(file_path_str: str) -> Dict[str, List[Dict[str, Any]]]:
    """带缓存的YAML加载（基于绝对路径）"""
    return load_yaml_cases(Path(file_path_str))


def _extract_yaml_param_names(metafunc, first_case: Dict[str, Any]) -> List[str]:
    """
    提取需从YAML注入的参数名

    测试函数参数名必须与YAML字段名一致；YAML中多出的字段忽略。
    """
    yaml_fields = set(first_case.keys()) if first_case else set()
    param_names = [p for p in metafunc.fixturenames if p in yaml_fields]

    if not param_names and yaml_fields:
        _raise_usage_error(
            metafunc,
            f"测试函数参数与YAML字段无匹配\n"
            f"  YAML字段: {sorted(yaml_fields)}\n"
            f"  测试参数: {sorted(metafunc.fixturenames)}"
        )

    return param_names


def _case_id(case: Dict[str, Any], group_name: str, idx: int) -> str:
    case_id = str(case.get("id", "")) or str(case.get("name", "")) or str(case.get("desc", ""))
    case_id = re.sub(r'[^a-zA-Z0-9_]', '_', case_id)
    case_id = re.sub(r'_+', '_', case_id).strip('_')
    if not case_id or not case_id[0].isalpha():
        case_id = f"{group_name}_{idx}"
    return case_id[:100]


def pytest_generate_tests(metafunc):
    """
    @pytest.mark.yaml_data(file="xxx.yaml", group="yyy") 参数化钩子

    文件或组缺失时发出警告并以空参数化跳过；格式错误直接终止收集。
    """
    marker = metafunc.definition.get_closest_marker("yaml_data")
    if marker is None:
        return

    try:
        file_name = marker.kwargs["file"]
        group_name = marker.kwargs["group"]
    except KeyError as e:
        _raise_usage_error(
            metafunc,
            f"@pytest.mark.yaml_data 缺少必需参数 {e}\n"
            f"  正确用法: @pytest.mark.yaml_data(file='xxx.yaml', group='yyy')"
        )
        return

    abs_file_path = TEST_DATA_DIR / file_name
    if not abs_file_path.exists():
        _warn_and_skip(metafunc, f"YAML数据文件不存在，跳过测试: {abs_file_path}")
        _parametrize_empty(metafunc)
        return

    try:
        res = _cached_load_yaml(str(abs_file_path))
    except InvalidYamlFormatError as e:
        _raise_usage_error(metafunc, f"YAML数据格式验证失败，测试终止:\n{e}")
        return

    cases = res.get(group_name)
    if not cases:
        _warn_and_skip(
            metafunc,
            f"YAML中不存在用例组 '{group_name}' 或该组为空，跳过测试。\n"
            f"  可用组: {list(res.keys()) or '[空]'}"
        )
        _parametrize_empty(metafunc)
        return

    param_names = _extract_yaml_param_names(metafunc, cases[0])

    param_values: List[Tuple[Any, ...]] = []
    param_ids: List[str] = []
    for idx, case in enumerate(cases):
        # 字段缺失的用例跳过
        if any(p not in case for p in param_names):
            continue
        param_values.append(tuple(case[p] for p in param_names))
        param_ids.append(_case_id(case, group_name, idx))

    if not param_values:
        _warn_and_skip(
            metafunc,
            f"用例组 '{group_name}' 无有效用例（所有用例均因字段缺失被跳过）\n"
            f"  所需参数: {param_names}"
        )
        _parametrize_empty(metafunc)
        return

    metafunc.parametrize(",".join(param_names), param_values, ids=param_ids, scope="function")


def _raise_usage_error(metafunc, message: str) -> None:
    raise pytest.UsageError(f"[YAML数据错误] in {metafunc.definition.nodeid}\n{message}")


def _warn_and_skip(metafunc, message: str) -> None:
    """收集阶段不能调用 pytest.skip()，改为警告并打印到 stderr"""
    full_message = f"[YAML数据] in {metafunc.definition.nodeid}\n{message}"
    warnings.warn(full_message, UserWarning, stacklevel=2)
    print(f"\n⚠️  YAML数据跳过 [{metafunc.definition.nodeid}]:\n{message}", file=sys.stderr)


def _parametrize_empty(metafunc) -> None:
    """参数化空列表，pytest 会把用例标记为 skipped"""
    safe_params = [
        p for p in metafunc.fixturenames
        if p.isidentifier() and not p.startswith("_") and p != "request"
    ]
    param_name = safe_params[0] if safe_params else "yaml_skip_marker"
    metafunc.parametrize(param_name, [], ids=[], scope="function")


# ==================== 配置与测试上下文 ====================
@pytest.fixture(scope="session")
def settings() -> ConfigManager:
    manager = ConfigManager()
    overrides = os.getenv("CONFIG_OVERRIDES")
    if overrides:
        manager.apply_overrides(overrides)
    manager.screenshot_dir.mkdir(parents=True, exist_ok=True)
    manager.resolve_path(manager.report.reports_dir).mkdir(parents=True, exist_ok=True)
    return manager


@pytest.fixture
def state(request) -> TestStateManager:
    """每个测试独立的运行状态"""
    manager = TestStateManager()
    manager.init_test(request.node.nodeid)
    yield manager
    logger.debug(f"Test metadata: {manager.get_test_metadata()}")
    manager.reset_state()


@pytest.fixture
def checkout_data() -> CheckoutDataProvider:
    return CheckoutDataProvider()


# ==================== Appium 会话与页面对象 ====================
@pytest.fixture
def driver(settings):
    session = create_driver(settings)
    yield session
    quit_driver(session)


@pytest.fixture
def screenshot_helper(driver, settings) -> ScreenshotHelper:
    return ScreenshotHelper(driver, settings.screenshot_dir)


@pytest.fixture
def login_page(driver, settings, screenshot_helper) -> LoginPage:
    return LoginPage(driver, settings, screenshot_helper)


@pytest.fixture
def products_page(driver, settings, screenshot_helper) -> ProductsPage:
    return ProductsPage(driver, settings, screenshot_helper)


@pytest.fixture
def product_details_page(driver, settings, screenshot_helper) -> ProductDetailsPage:
    return ProductDetailsPage(driver, settings, screenshot_helper)


@pytest.fixture
def cart_page(driver, settings, screenshot_helper) -> CartPage:
    return CartPage(driver, settings, screenshot_helper)


@pytest.fixture
def checkout_info_page(driver, settings, screenshot_helper) -> CheckoutInfoPage:
    return CheckoutInfoPage(driver, settings, screenshot_helper)


@pytest.fixture
def order_summary_page(driver, settings, screenshot_helper) -> OrderSummaryPage:
    return OrderSummaryPage(driver, settings, screenshot_helper)


@pytest.fixture
def payment_details_page(driver, settings, screenshot_helper) -> PaymentDetailsPage:
    return PaymentDetailsPage(driver, settings, screenshot_helper)


@pytest.fixture
def confirmation_page(driver, settings, screenshot_helper) -> OrderConfirmationPage:
    return OrderConfirmationPage(driver, settings, screenshot_helper)


@pytest.fixture
def logged_in(login_page, products_page) -> ProductsPage:
    """以标准用户登录并停在商品列表页"""
    login_page.open()
    login_page.login_as_standard_user()
    products_page.wait_for_page_to_load()
    return products_page


# ==================== 失败截图 ====================
@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when != "call" or not report.failed:
        return

    session = item.funcargs.get("driver") if hasattr(item, "funcargs") else None
    if session is None:
        return
    helper = item.funcargs.get("screenshot_helper") or ScreenshotHelper(session)
    path = helper.take_failure_screenshot(item.name)
    if path:
        logger.error(f"Test failed: {item.nodeid}, screenshot: {path}")
