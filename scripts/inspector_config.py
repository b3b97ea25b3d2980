"""
输出 Appium Inspector 使用的 capabilities（由 Appium 自行构建 WDA）

Usage:
    python -m scripts.inspector_config
"""
import json
import sys
from pathlib import Path

from config import ConfigManager
from utils.capability_utils import clean_capabilities


def main() -> int:
    settings = ConfigManager()
    Path(settings.resolve_path(Path(settings.wda.derived_data_path))).mkdir(parents=True, exist_ok=True)
    caps = clean_capabilities(settings.auto_wda_capabilities())
    server = settings.appium

    # 标准输出只用于复制粘贴
    print("\nCapabilities for Appium Inspector:\n")
    print(json.dumps(caps, indent=2, ensure_ascii=False))
    print("\nInstructions:")
    print("1. Start Appium server: npx appium --relaxed-security")
    print("2. Make sure a simulator is booted; Appium builds and launches WebDriverAgent itself")
    print("3. Copy the above capabilities to Appium Inspector")
    print(f"4. Remote Host: {server.host}, Port: {server.port}, Path: {server.path}")
    print("5. Click Start Session\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
