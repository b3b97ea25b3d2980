from unittest.mock import Mock, call, patch

import pytest
from selenium.common.exceptions import SessionNotCreatedException, WebDriverException
from urllib3.exceptions import MaxRetryError

from utils.session import SessionError, build_client_config, create_driver, quit_driver, restart_app


@pytest.fixture
def settings():
    mock = Mock()
    mock.appium.url = "http://127.0.0.1:4723/"
    mock.appium.connection_retry_timeout = 180000
    mock.appium.connection_retry_count = 2
    mock.capabilities.return_value = {
        "platformName": "iOS",
        "appium:deviceName": "iPhone 16 Plus",
        "appium:webDriverAgentUrl": "undefined",
        "appium:noReset": False,
    }
    return mock


@patch("utils.session.webdriver.Remote")
def test_create_driver_cleans_capabilities(mock_remote, settings):
    mock_remote.return_value.session_id = "abc"
    driver = create_driver(settings)

    assert driver is mock_remote.return_value
    _, kwargs = mock_remote.call_args
    assert kwargs["command_executor"] == "http://127.0.0.1:4723/"
    caps = kwargs["options"].to_capabilities()
    assert "appium:webDriverAgentUrl" not in caps
    assert caps["appium:noReset"] is False


@patch("utils.session.webdriver.Remote")
def test_command_timeout_from_connection_retry_timeout(mock_remote, settings):
    create_driver(settings)
    _, kwargs = mock_remote.call_args
    client_config = kwargs["client_config"]
    assert client_config.remote_server_addr == "http://127.0.0.1:4723/"
    assert client_config.timeout == 180


def test_build_client_config():
    appium = Mock(url="http://10.0.0.5:4723/", connection_retry_timeout=30000)
    assert build_client_config(appium).timeout == 30


@patch("utils.session.webdriver.Remote")
def test_explicit_capabilities_win(mock_remote, settings):
    create_driver(settings, {"platformName": "iOS", "appium:udid": "SIM-1"})
    _, kwargs = mock_remote.call_args
    assert kwargs["options"].to_capabilities()["appium:udid"] == "SIM-1"
    settings.capabilities.assert_not_called()


@patch("utils.session.webdriver.Remote")
def test_unreachable_server_retried_connection_retry_count_times(mock_remote, settings):
    error = MaxRetryError(None, "/session")
    mock_remote.side_effect = error
    sleep = Mock()

    with pytest.raises(SessionError) as exc_info:
        create_driver(settings, sleep=sleep)

    assert exc_info.value.__cause__ is error
    assert mock_remote.call_count == 3
    assert sleep.call_args_list == [call(1.0), call(1.0)]


@patch("utils.session.webdriver.Remote")
def test_server_recovers_within_retries(mock_remote, settings):
    session = Mock(session_id="abc")
    mock_remote.side_effect = [ConnectionRefusedError("refused"), session]
    assert create_driver(settings, sleep=Mock()) is session


@pytest.mark.parametrize("error", [
    SessionNotCreatedException("xcodebuild failed"),
    MaxRetryError(None, "/session"),
    ConnectionRefusedError("refused"),
])
@patch("utils.session.webdriver.Remote")
def test_failures_become_session_error(mock_remote, settings, error):
    mock_remote.side_effect = error
    with pytest.raises(SessionError) as exc_info:
        create_driver(settings, sleep=Mock())
    assert exc_info.value.__cause__ is error


@patch("utils.session.webdriver.Remote")
def test_rejected_session_is_not_retried(mock_remote, settings):
    mock_remote.side_effect = SessionNotCreatedException("xcodebuild failed")
    with pytest.raises(SessionError):
        create_driver(settings, sleep=Mock())
    assert mock_remote.call_count == 1


def test_quit_driver_tolerates_dead_session():
    driver = Mock()
    driver.quit.side_effect = WebDriverException("invalid session id")
    quit_driver(driver)
    driver.quit.assert_called_once()
    quit_driver(None)


def test_restart_app_terminates_then_activates():
    driver = Mock()
    restart_app(driver, "com.saucelabs.SwagLabsMobileApp")
    assert driver.execute_script.call_args_list == [
        call("mobile: terminateApp", {"bundleId": "com.saucelabs.SwagLabsMobileApp"}),
        call("mobile: activateApp", {"bundleId": "com.saucelabs.SwagLabsMobileApp"}),
    ]
