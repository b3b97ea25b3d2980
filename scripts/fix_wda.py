"""
WebDriverAgent 故障排查

依次输出 Appium 版本、已安装驱动、可用模拟器、8100 端口占用情况，
清理 Xcode DerivedData 并重新构建 WDA，最后给出手动启动步骤。

Usage:
    python -m scripts.fix_wda
"""
import re
import sys
from typing import Optional

from utils.logger import get_logger

from ._shell import run_command

logger = get_logger(__name__)

WDA_PORT = 8100


def parse_booted_udid(simctl_output: Optional[str]) -> Optional[str]:
    """从 `xcrun simctl list devices | grep Booted` 的输出中取第一个 UDID"""
    if not simctl_output:
        return None
    match = re.search(r"\(([0-9A-Fa-f-]{36})\)", simctl_output)
    return match.group(1) if match else None


def open_wda_command(udid: Optional[str], port: int = WDA_PORT) -> str:
    command = f"npx appium driver run xcuitest open-wda -p {port}"
    return f"{command} --udid={udid}" if udid else command


def main() -> int:
    logger.info("=== WebDriverAgent Troubleshooting Tool ===")

    run_command("appium --version", "Checking Appium installation")
    run_command("appium driver list --installed", "Checking XCUITest driver")
    run_command("xcrun simctl list devices available", "Available iOS simulators")
    run_command(f"lsof -i :{WDA_PORT}", "Checking for running WebDriverAgent instances")
    run_command("rm -rf ~/Library/Developer/Xcode/DerivedData", "Cleaning Xcode DerivedData")
    run_command("npx appium driver run xcuitest build-wda", "Rebuilding WebDriverAgent")

    booted = run_command("xcrun simctl list devices | grep 'Booted'", "Getting booted simulator UDID")
    udid = parse_booted_udid(booted.stdout)
    if udid:
        logger.info(f"Found booted simulator with UDID: {udid}")

    logger.info("=== Manual WDA Start ===")
    logger.info(f"To start WDA manually, run in a new terminal: {open_wda_command(udid)}")

    logger.info("=== Troubleshooting Complete ===")
    logger.info("Next steps:")
    logger.info("1. Start Appium server in a new terminal: npx appium --relaxed-security")
    logger.info(f"2. In another terminal, start WDA with: {open_wda_command(udid)}")
    logger.info("3. Verify the session: python -m scripts.check_session")
    logger.info("4. If still failing, check the Appium server log for specific errors")
    return 0


if __name__ == "__main__":
    sys.exit(main())
