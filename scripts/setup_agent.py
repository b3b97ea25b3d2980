"""
启动 WebDriverAgent 并验证会话

1. 释放 WDA 端口
2. 没有已启动的模拟器时按配置的设备名启动
3. 以分离进程启动 WDA，轮询 /status（15 次，间隔 2 秒）
4. 创建一次 Appium 会话，截图后退出

前提：Appium 服务已在运行（npx appium --relaxed-security）。

Usage:
    python -m scripts.setup_agent
"""
import subprocess
import sys
import time
from pathlib import Path
from typing import Optional

from config import ConfigManager
from utils.agent_status import wait_for_agent_ready
from utils.logger import get_logger, log_exception
from utils.screenshot_helper import ScreenshotHelper
from utils.session import SessionError, create_driver, quit_driver

from ._shell import run_command
from .fix_wda import open_wda_command, parse_booted_udid

logger = get_logger(__name__)

SIMULATOR_BOOT_WAIT = 30  # 秒
READY_ATTEMPTS = 15
READY_INTERVAL = 2.0


def free_port(port: int) -> None:
    in_use = run_command(f"lsof -ti:{port}", f"Checking port {port}")
    if in_use.success and in_use.stdout.strip():
        logger.info(f"Port {port} is in use, freeing it")
        run_command(f"lsof -ti:{port} | xargs kill -9", f"Killing processes on port {port}")
    else:
        logger.info(f"Port {port} is free")


def ensure_simulator(device_name: str) -> Optional[str]:
    """返回已启动模拟器的 UDID，必要时先启动"""
    booted = run_command("xcrun simctl list devices | grep 'Booted'", "Checking for booted simulators")
    udid = parse_booted_udid(booted.stdout)
    if udid:
        return udid

    logger.info(f"No booted simulator found, booting {device_name}")
    run_command(f'xcrun simctl boot "{device_name}"', "Booting simulator")
    run_command("open -a Simulator", "Opening Simulator app")
    logger.info(f"Waiting {SIMULATOR_BOOT_WAIT}s for the simulator to boot")
    time.sleep(SIMULATOR_BOOT_WAIT)

    booted = run_command("xcrun simctl list devices | grep 'Booted'")
    return parse_booted_udid(booted.stdout)


def start_agent_detached(udid: Optional[str], port: int) -> subprocess.Popen:
    command = open_wda_command(udid, port)
    logger.info(f"Starting WebDriverAgent: {command}")
    return subprocess.Popen(
        command.split(),
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )


def main() -> int:
    settings = ConfigManager()
    wda = settings.wda
    logger.info("=== iOS Appium Setup ===")

    Path(settings.resolve_path(Path(wda.derived_data_path))).mkdir(parents=True, exist_ok=True)
    free_port(wda.port)
    udid = ensure_simulator(settings.device.device_name)
    start_agent_detached(udid, wda.port)

    if not wait_for_agent_ready(wda.status_url, attempts=READY_ATTEMPTS, interval=READY_INTERVAL):
        logger.error("Failed to start WebDriverAgent")
        logger.error(f"Check its log with: {open_wda_command(udid, wda.port)} --debug")
        return 1

    caps = settings.ios_capabilities()
    caps["appium:usePrebuiltWDA"] = True
    caps["appium:preventWDAAttachments"] = True

    driver = None
    try:
        driver = create_driver(settings, caps)
        path = ScreenshotHelper(driver, settings.screenshot_dir, enable_allure=False).take_screenshot("setup-agent")
        logger.info(f"Session started, screenshot saved to {path}")
    except SessionError as e:
        log_exception(logger, e, "WebDriver session")
        return 1
    finally:
        quit_driver(driver)

    logger.info("=== Next Steps ===")
    logger.info("Print Appium Inspector capabilities with: python -m scripts.inspector_config")
    return 0


if __name__ == "__main__":
    sys.exit(main())
