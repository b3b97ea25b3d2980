"""
会话冒烟检查

清洗并校验 capabilities，探测 WDA，创建会话后检查登录页元素是否存在。

Usage:
    python -m scripts.check_session
"""
import sys

from selenium.common.exceptions import WebDriverException

from config import ConfigManager
from utils.agent_status import check_agent_status
from utils.capability_utils import clean_capabilities, find_undefined_paths, verify_capabilities
from utils.logger import get_logger
from utils.session import SessionError, create_driver, quit_driver

logger = get_logger(__name__)

LOGIN_MARKERS = ("test-Username", "test-Password")


def main() -> int:
    settings = ConfigManager()
    caps = clean_capabilities(settings.ios_capabilities())

    if not verify_capabilities(caps):
        logger.error(f"Capabilities contain undefined values: {find_undefined_paths(caps)}")
        return 1

    if not check_agent_status(settings.wda.status_url):
        logger.error(f"WDA is not running at {settings.wda.url}")
        return 1
    logger.info("WDA is running ✅")

    driver = None
    try:
        driver = create_driver(settings, caps)
        source = driver.page_source or ""
        if all(marker in source for marker in LOGIN_MARKERS):
            logger.info("App launched successfully ✅")
        else:
            logger.warning("App launched but login page not found")
    except SessionError as e:
        logger.error(f"Error: {e}")
        return 1
    except WebDriverException as e:
        logger.error(f"Error reading page source: {e.msg or e}")
        return 1
    finally:
        quit_driver(driver)
    return 0


if __name__ == "__main__":
    sys.exit(main())
