"""
登录页面对象
"""
from typing import Optional

from config.manager import Credential, CredentialsConfig, DeviceConfig
from utils.logger import get_logger, log_step
from utils.session import restart_app

from .base_page import BasePage
from .login_selector import LOGIN_SCREEN, error_message, login_button, password_input, username_input

logger = get_logger(__name__)


class LoginPage(BasePage):
    """登录页"""

    PAGE_IDENTIFIER = LOGIN_SCREEN

    @property
    def credentials(self) -> CredentialsConfig:
        return self.settings.credentials if self.settings is not None else CredentialsConfig()

    def open(self) -> None:
        """等待登录页出现（应用启动后的首屏）"""
        self.wait_for_page_to_load()

    def relaunch(self) -> None:
        """结束并重新激活应用，回到登录页"""
        device = self.settings.device if self.settings is not None else DeviceConfig()
        restart_app(self.driver, device.bundle_id)
        self.wait_for_page_to_load()

    @log_step("Login")
    def login(self, username: str, password: str) -> None:
        """
        输入账号密码并提交

        Args:
            username: 用户名
            password: 密码
        """
        logger.info(f"Logging in as {username}")
        self.set_text(username_input, username)
        self.set_text(password_input, password)
        self.click(login_button)

    def _login_with(self, credential: Credential) -> None:
        self.login(credential.username, credential.password)

    def login_as_standard_user(self) -> None:
        self._login_with(self.credentials.standard_user)

    def login_as_locked_out_user(self) -> None:
        self._login_with(self.credentials.locked_out_user)

    def login_as_problem_user(self) -> None:
        self._login_with(self.credentials.problem_user)

    def is_error_message_displayed(self, timeout: int = 1000) -> bool:
        return self.is_displayed(error_message, timeout=timeout)

    def get_error_message(self) -> Optional[str]:
        """读取错误提示；不存在时返回 None"""
        if not self.is_error_message_displayed():
            return None
        return self.get_text(error_message)
