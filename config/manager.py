import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ._path import PROJECT_ROOT
from .env_loader import EnvLoader
from .yaml_loader import YamlLoader, deep_merge


class AppiumServerConfig(BaseModel):
    """Appium 服务端配置"""
    host: str = "127.0.0.1"
    port: int = 4723
    path: str = "/"
    connection_retry_timeout: int = Field(default=180000, gt=0)  # 毫秒，单条 HTTP 命令超时
    connection_retry_count: int = Field(default=5, ge=0)

    model_config = ConfigDict(protected_namespaces=())

    @property
    def url(self) -> str:
        path = self.path if self.path.startswith("/") else f"/{self.path}"
        return f"http://{self.host}:{self.port}{path}"


class DeviceConfig(BaseModel):
    """被测设备配置"""
    device_name: str = "iPhone 16 Plus"
    platform_version: str = "18.4"
    app_path: str = "./apps/iOS.Simulator.SauceLabs.Mobile.Sample.app.2.7.1.app"
    bundle_id: str = "com.saucelabs.SwagLabsMobileApp"
    no_reset: bool = False

    model_config = ConfigDict(protected_namespaces=())

    @field_validator("platform_version", mode="before")
    @classmethod
    def coerce_version(cls, v):
        # YAML 会把 18.4 读成 float
        return str(v)


class WdaConfig(BaseModel):
    """WebDriverAgent 配置"""
    url: Optional[str] = "http://127.0.0.1:8100"
    port: int = 8100
    use_new_wda: bool = False
    use_prebuilt_wda: bool = True
    derived_data_path: str = "./derived_data"
    startup_retries: int = 4
    startup_retry_interval: int = 20000

    model_config = ConfigDict(protected_namespaces=())

    @property
    def status_url(self) -> str:
        base = (self.url or f"http://127.0.0.1:{self.port}").rstrip("/")
        return f"{base}/status"


class TimeoutsConfig(BaseModel):
    """超时配置模型（毫秒，new_command 为秒）"""
    element_wait: int = 10000
    page_load: int = 15000
    poll_interval: int = 500
    candidate: int = 2000
    new_command: int = 240

    model_config = ConfigDict(protected_namespaces=())

    @field_validator("*")
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("超时值必须大于0")
        return v


class RetryDefaults(BaseModel):
    """动作级重试默认值"""
    max_attempts: int = Field(default=3, ge=1)
    interval_ms: int = Field(default=1000, ge=0)
    exponential_backoff: bool = True

    model_config = ConfigDict(protected_namespaces=())


class ReportConfig(BaseModel):
    """报告与截图目录"""
    reports_dir: Path = Path("reports")
    screenshot_dir: Path = Path("reports/screenshots")

    model_config = ConfigDict(protected_namespaces=())


class LogConfig(BaseModel):
    """日志配置模型"""
    log_dir: Path = Path("logs")
    log_level: str = "INFO"

    model_config = ConfigDict(protected_namespaces=())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = str(v).upper()
        if v not in valid_levels:
            raise ValueError(f"无效的日志级别: {v}, 必须是 {valid_levels}")
        return v


class Credential(BaseModel):
    username: str
    password: str


class CredentialsConfig(BaseModel):
    """演示应用内置账号"""
    standard_user: Credential = Credential(username="standard_user", password="secret_sauce")
    locked_out_user: Credential = Credential(username="locked_out_user", password="secret_sauce")
    problem_user: Credential = Credential(username="problem_user", password="secret_sauce")

    model_config = ConfigDict(protected_namespaces=())


class AppConfig(BaseModel):
    """应用级配置模型"""

    env: str = "dev"
    platform: str = "ios"

    appium: AppiumServerConfig = Field(default_factory=AppiumServerConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)
    wda: WdaConfig = Field(default_factory=WdaConfig)
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)
    retry: RetryDefaults = Field(default_factory=RetryDefaults)
    report: ReportConfig = Field(default_factory=ReportConfig)
    log: LogConfig = Field(default_factory=LogConfig)
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)

    project_root: Path = PROJECT_ROOT

    model_config = ConfigDict(protected_namespaces=(), extra="ignore")

    @field_validator("env")
    @classmethod
    def validate_env(cls, v):
        valid_envs = ["dev", "ci", "local"]
        if v not in valid_envs:
            raise ValueError(f"无效环境: {v}, 必须是 {valid_envs}")
        return v

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v):
        v = str(v).lower()
        if v not in ("ios", "android"):
            raise ValueError(f"无效平台: {v}, 必须是 ['ios', 'android']")
        return v


class ConfigManager:
    """
    配置管理核心

    合并顺序（后者覆盖前者）：
        base.yaml -> {env}.yaml -> .env / 环境变量 -> apply_overrides()

    每个测试会话显式创建一个实例，不提供全局单例。
    """

    def __init__(
        self,
        yaml_loader: Optional[YamlLoader] = None,
        env_loader: Optional[EnvLoader] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self._config: Optional[AppConfig] = None
        self._yaml_loader = yaml_loader or YamlLoader()
        self._env_loader = env_loader or EnvLoader()
        self._overrides: Dict[str, Any] = dict(overrides or {})

    def _load_config(self) -> AppConfig:
        env_config = self._env_loader.load()
        env = self._overrides.get("env") or env_config.get("env") or os.getenv("ENV", "dev")

        base_config = self._yaml_loader.load_environment(env=env)
        merged = deep_merge(deep_merge(base_config, env_config), self._overrides)

        try:
            return AppConfig(**merged)
        except ValidationError as e:
            self._handle_validation_error(e)

    def initialize(self) -> "ConfigManager":
        if self._config is None:
            self._config = self._load_config()
        return self

    @property
    def config(self) -> AppConfig:
        self.initialize()
        return self._config

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return getattr(self.config, name)
        except AttributeError:
            available = [f for f in AppConfig.model_fields]
            raise AttributeError(f"配置中不存在属性: {name}\n可用属性: {', '.join(available)}") from None

    def get(self, path: str, default: Any = None) -> Any:
        """
        安全获取嵌套配置
        示例: settings.get("timeouts.page_load", 15000)
        """
        current: Any = self.config.model_dump()
        for key in path.split("."):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default
        return current

    def apply_overrides(self, overrides_str: str) -> None:
        """
        应用命令行覆盖，格式: "key1=value1,key2.subkey=value2"

        覆盖会使已加载的配置失效，下次访问时重新构建。
        """
        if not overrides_str:
            return

        for pair in overrides_str.split(","):
            if "=" not in pair:
                continue
            key, value = pair.split("=", 1)
            keys = [k.strip() for k in key.strip().split(".")]
            current = self._overrides
            for k in keys[:-1]:
                current = current.setdefault(k, {})
            current[keys[-1]] = self._parse_value(value.strip())
        self._config = None

    @staticmethod
    def _parse_value(value: str) -> Any:
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            return value

    # ==================== 平台查询 ====================

    def is_ios(self) -> bool:
        return self.config.platform == "ios"

    def is_android(self) -> bool:
        return self.config.platform == "android"

    def resolve_path(self, path: Path) -> Path:
        """相对路径按项目根目录解析"""
        path = Path(path)
        return path if path.is_absolute() else (self.config.project_root / path).resolve()

    @property
    def app_path(self) -> str:
        return str(self.resolve_path(Path(self.config.device.app_path)))

    @property
    def screenshot_dir(self) -> Path:
        return self.resolve_path(self.config.report.screenshot_dir)

    # ==================== Capabilities ====================

    def ios_capabilities(self) -> Dict[str, Any]:
        """构建 XCUITest 会话的 W3C capabilities（连接已运行的 WDA）"""
        cfg = self.config
        return {
            "platformName": "iOS",
            "appium:automationName": "XCUITest",
            "appium:deviceName": cfg.device.device_name,
            "appium:platformVersion": cfg.device.platform_version,
            "appium:app": self.app_path,
            "appium:webDriverAgentUrl": cfg.wda.url,
            "appium:useNewWDA": cfg.wda.use_new_wda,
            "appium:usePrebuiltWDA": cfg.wda.use_prebuilt_wda,
            "appium:bundleId": cfg.device.bundle_id,
            "appium:derivedDataPath": str(self.resolve_path(Path(cfg.wda.derived_data_path))),
            "appium:noReset": cfg.device.no_reset,
            "appium:wdaStartupRetries": cfg.wda.startup_retries,
            "appium:wdaStartupRetryInterval": cfg.wda.startup_retry_interval,
            "appium:newCommandTimeout": cfg.timeouts.new_command,
        }

    def auto_wda_capabilities(self) -> Dict[str, Any]:
        """由 Appium 自行构建并启动 WDA 的 capabilities"""
        caps = self.ios_capabilities()
        caps.pop("appium:webDriverAgentUrl", None)
        caps["appium:useNewWDA"] = True
        caps["appium:usePrebuiltWDA"] = False
        return caps

    def android_capabilities(self) -> Dict[str, Any]:
        cfg = self.config
        return {
            "platformName": "Android",
            "appium:automationName": "UiAutomator2",
            "appium:deviceName": cfg.device.device_name,
            "appium:platformVersion": cfg.device.platform_version,
            "appium:app": self.app_path,
            "appium:noReset": cfg.device.no_reset,
            "appium:newCommandTimeout": cfg.timeouts.new_command,
        }

    def capabilities(self) -> Dict[str, Any]:
        """按当前平台返回会话 capabilities"""
        return self.ios_capabilities() if self.is_ios() else self.android_capabilities()

    def to_yaml(self) -> str:
        """生成配置快照YAML（不含账号密码）"""
        data = self.config.model_dump(mode="json", exclude={"credentials"})
        return yaml.dump(data, default_flow_style=False, sort_keys=False)

    @staticmethod
    def _handle_validation_error(error: ValidationError):
        messages = []
        for err in error.errors():
            loc = ".".join(str(part) for part in err["loc"])
            messages.append(f"配置项 '{loc}': {err['msg']} (值: {err.get('input')})")
        raise RuntimeError("配置验证失败:\n" + "\n".join(messages)) from None


if __name__ == '__main__':
    print(ConfigManager().to_yaml())
