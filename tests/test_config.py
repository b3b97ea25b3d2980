from pathlib import Path

import pytest
import yaml

from config import ConfigManager, EnvLoader, YamlLoader
from config.env_loader import ENV_MAPPING
from config.yaml_loader import deep_merge


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_MAPPING:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_dir(tmp_path):
    directory = tmp_path / "environments"
    directory.mkdir()
    (directory / "base.yaml").write_text(yaml.safe_dump({
        "env": "dev",
        "device": {"device_name": "iPhone 15", "platform_version": 17.5},
        "timeouts": {"element_wait": 8000},
    }), encoding="utf-8")
    (directory / "ci.yaml").write_text(yaml.safe_dump({
        "timeouts": {"element_wait": 20000},
        "wda": {"use_new_wda": True},
    }), encoding="utf-8")
    return directory


def make_manager(config_dir: Path, tmp_path: Path, **kwargs) -> ConfigManager:
    return ConfigManager(
        yaml_loader=YamlLoader(config_dir),
        env_loader=EnvLoader(tmp_path / "missing.env"),
        **kwargs,
    )


def test_project_defaults(tmp_path):
    settings = ConfigManager(env_loader=EnvLoader(tmp_path / "missing.env"))

    assert settings.is_ios()
    assert settings.device.device_name == "iPhone 16 Plus"
    assert settings.device.platform_version == "18.4"
    assert settings.appium.url == "http://127.0.0.1:4723/"
    assert settings.wda.status_url == "http://127.0.0.1:8100/status"
    assert settings.timeouts.element_wait == 10000
    assert settings.credentials.standard_user.password == "secret_sauce"


def test_yaml_values_and_version_coercion(config_dir, tmp_path):
    settings = make_manager(config_dir, tmp_path)
    assert settings.device.device_name == "iPhone 15"
    assert settings.device.platform_version == "17.5"
    assert settings.timeouts.element_wait == 8000
    # 未配置的字段使用模型默认值
    assert settings.timeouts.page_load == 15000


def test_environment_file_overrides_base(config_dir, tmp_path, monkeypatch):
    monkeypatch.setenv("ENV", "ci")
    settings = make_manager(config_dir, tmp_path)
    assert settings.env == "ci"
    assert settings.timeouts.element_wait == 20000
    assert settings.wda.use_new_wda is True
    assert settings.device.device_name == "iPhone 15"


def test_environment_variables_override_yaml(config_dir, tmp_path, monkeypatch):
    monkeypatch.setenv("APPIUM_PORT", "4999")
    monkeypatch.setenv("IOS_DEVICE_NAME", "iPhone SE")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = make_manager(config_dir, tmp_path)
    assert settings.appium.port == 4999
    assert settings.device.device_name == "iPhone SE"
    assert settings.log.log_level == "DEBUG"


def test_dotenv_file_is_loaded(config_dir, tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("WDA_URL=http://10.0.0.5:8100\n", encoding="utf-8")
    # 登记后删除，测试结束时清理 load_dotenv 写入的值
    monkeypatch.setenv("WDA_URL", "unset")
    monkeypatch.delenv("WDA_URL")
    settings = ConfigManager(yaml_loader=YamlLoader(config_dir), env_loader=EnvLoader(env_file))
    assert settings.wda.status_url == "http://10.0.0.5:8100/status"


def test_apply_overrides(config_dir, tmp_path):
    settings = make_manager(config_dir, tmp_path)
    assert settings.timeouts.element_wait == 8000

    settings.apply_overrides("timeouts.element_wait=2500,wda.use_new_wda=true,device.device_name=iPad")

    assert settings.timeouts.element_wait == 2500
    assert settings.wda.use_new_wda is True
    assert settings.device.device_name == "iPad"


def test_invalid_values_raise_runtime_error(config_dir, tmp_path, monkeypatch):
    monkeypatch.setenv("PLATFORM", "windows")
    settings = make_manager(config_dir, tmp_path)
    with pytest.raises(RuntimeError, match="platform"):
        settings.initialize()


def test_non_positive_timeout_rejected(config_dir, tmp_path):
    settings = make_manager(config_dir, tmp_path, overrides={"timeouts": {"page_load": 0}})
    with pytest.raises(RuntimeError, match="timeouts.page_load"):
        settings.initialize()


def test_negative_connection_retry_count_rejected(config_dir, tmp_path):
    settings = make_manager(config_dir, tmp_path, overrides={"appium": {"connection_retry_count": -1}})
    with pytest.raises(RuntimeError, match="appium.connection_retry_count"):
        settings.initialize()


def test_get_and_unknown_attribute(config_dir, tmp_path):
    settings = make_manager(config_dir, tmp_path)
    assert settings.get("timeouts.element_wait") == 8000
    assert settings.get("timeouts.nope", "fallback") == "fallback"
    with pytest.raises(AttributeError):
        settings.no_such_section


def test_ios_capabilities(config_dir, tmp_path):
    caps = make_manager(config_dir, tmp_path).ios_capabilities()

    assert caps["platformName"] == "iOS"
    assert caps["appium:automationName"] == "XCUITest"
    assert caps["appium:deviceName"] == "iPhone 15"
    assert caps["appium:webDriverAgentUrl"] == "http://127.0.0.1:8100"
    assert caps["appium:noReset"] is False
    assert Path(caps["appium:app"]).is_absolute()
    assert all(key == "platformName" or key.startswith("appium:") for key in caps)


def test_ios_capabilities_carry_wda_and_bundle_settings(config_dir, tmp_path):
    settings = make_manager(config_dir, tmp_path)
    caps = settings.ios_capabilities()
    assert caps["appium:usePrebuiltWDA"] is True
    assert caps["appium:bundleId"] == settings.device.bundle_id == "com.saucelabs.SwagLabsMobileApp"


def test_auto_wda_capabilities(config_dir, tmp_path):
    caps = make_manager(config_dir, tmp_path).auto_wda_capabilities()
    assert "appium:webDriverAgentUrl" not in caps
    assert caps["appium:useNewWDA"] is True
    assert caps["appium:usePrebuiltWDA"] is False


def test_to_yaml_excludes_credentials(config_dir, tmp_path):
    dumped = yaml.safe_load(make_manager(config_dir, tmp_path).to_yaml())
    assert "credentials" not in dumped
    assert dumped["device"]["device_name"] == "iPhone 15"


def test_deep_merge():
    assert deep_merge({"a": {"b": 1, "c": 2}, "d": 1}, {"a": {"c": 3}, "e": 4}) == \
        {"a": {"b": 1, "c": 3}, "d": 1, "e": 4}


def test_missing_base_yaml(tmp_path):
    with pytest.raises(FileNotFoundError):
        YamlLoader(tmp_path).load_environment("dev")
