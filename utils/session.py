"""
Appium 会话工厂

create_driver() 清洗 capabilities 后创建远程会话，任何失败都以 SessionError 抛出；
只有连接层失败会按配置重试，会话失败对当前测试是致命的。
"""
import time
from typing import Any, Callable, Dict, Optional

from appium import webdriver
from appium.options.common import AppiumOptions
from appium.webdriver.client_config import AppiumClientConfig
from selenium.common.exceptions import WebDriverException
from urllib3.exceptions import HTTPError as TransportError

from utils.capability_utils import clean_capabilities, verify_capabilities
from utils.logger import get_logger, log_duration
from utils.retry import RetryConfig, retry

logger = get_logger(__name__)

# 连接 Appium 服务失败后的重试间隔（毫秒）
CONNECTION_RETRY_INTERVAL_MS = 1000


class SessionError(Exception):
    """自动化会话无法创建或在测试中丢失"""
    pass


def build_options(capabilities: Dict[str, Any]) -> AppiumOptions:
    options = AppiumOptions()
    options.load_capabilities(capabilities)
    return options


def build_client_config(appium_settings) -> AppiumClientConfig:
    """HTTP 客户端配置：单条命令超时取 connection_retry_timeout（毫秒）"""
    return AppiumClientConfig(
        remote_server_addr=appium_settings.url,
        timeout=appium_settings.connection_retry_timeout / 1000,
    )


def create_driver(settings, capabilities: Optional[Dict[str, Any]] = None,
                  sleep: Callable[[float], None] = time.sleep):
    """
    创建 Appium 会话

    连不上 Appium 服务时按 appium.connection_retry_count 重试；
    服务端拒绝创建会话（WebDriverException）不重试。

    Args:
        settings: ConfigManager 实例
        capabilities: 自定义 capabilities，缺省按当前平台构建
        sleep: 重试等待函数（秒），测试中可替换

    Returns:
        appium.webdriver.Remote

    Raises:
        SessionError: capabilities 无效或会话创建失败
    """
    caps = clean_capabilities(capabilities if capabilities is not None else settings.capabilities())
    if not verify_capabilities(caps):
        raise SessionError("Capabilities still contain undefined values after cleaning")

    appium = settings.appium
    server_url = appium.url
    connect_retry = RetryConfig(
        max_attempts=appium.connection_retry_count + 1,
        interval_ms=CONNECTION_RETRY_INTERVAL_MS,
        exponential_backoff=False,
    )
    logger.info(f"Creating Appium session at {server_url} "
                f"({caps.get('platformName')} / {caps.get('appium:deviceName')})")
    try:
        with log_duration("create Appium session", logger):
            driver = retry(
                lambda: webdriver.Remote(
                    command_executor=server_url,
                    options=build_options(caps),
                    client_config=build_client_config(appium),
                ),
                connect_retry,
                retry_on=(OSError, TransportError),
                description=f"connect to {server_url}",
                sleep=sleep,
            )
    except WebDriverException as e:
        raise SessionError(f"Failed to create session at {server_url}: {e.msg or e}") from e
    except (OSError, TransportError) as e:
        raise SessionError(f"Appium server unreachable at {server_url}: {e}") from e

    logger.info(f"Session created: {driver.session_id}")
    return driver


def quit_driver(driver) -> None:
    """结束会话；会话已失效时仅记录告警"""
    if driver is None:
        return
    session_id = getattr(driver, "session_id", None)
    try:
        driver.quit()
        logger.info(f"Session {session_id} closed")
    except WebDriverException as e:
        logger.warning(f"Error closing session {session_id}: {e}")


def restart_app(driver, bundle_id: str) -> None:
    """结束并重新激活被测应用，会话保持不变"""
    logger.info(f"Restarting app {bundle_id}")
    driver.execute_script("mobile: terminateApp", {"bundleId": bundle_id})
    driver.execute_script("mobile: activateApp", {"bundleId": bundle_id})
