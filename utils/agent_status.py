"""WebDriverAgent /status 探测"""
import time
from typing import Callable

import requests

from utils.logger import get_logger

logger = get_logger(__name__)


def check_agent_status(status_url: str, timeout: float = 5.0) -> bool:
    """
    GET {agent}/status，返回 value.ready

    连接失败、非 2xx 或响应格式不符时返回 False。
    """
    try:
        response = requests.get(status_url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.debug(f"Agent status check failed for {status_url}: {e}")
        return False

    value = payload.get("value") if isinstance(payload, dict) else None
    ready = bool(value.get("ready")) if isinstance(value, dict) else False
    logger.debug(f"Agent status {status_url}: ready={ready}")
    return ready


def wait_for_agent_ready(
    status_url: str,
    attempts: int = 15,
    interval: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """轮询 /status，直到 ready 或次数耗尽"""
    for attempt in range(1, attempts + 1):
        if check_agent_status(status_url):
            logger.info(f"WebDriverAgent ready after {attempt} attempt(s)")
            return True
        logger.info(f"Waiting for WebDriverAgent... ({attempt}/{attempts})")
        if attempt < attempts:
            sleep(interval)
    return False
