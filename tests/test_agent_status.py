from unittest.mock import Mock, patch

import requests

from utils.agent_status import check_agent_status, wait_for_agent_ready

STATUS_URL = "http://127.0.0.1:8100/status"


def response_with(payload):
    response = Mock()
    response.raise_for_status = Mock()
    response.json = Mock(return_value=payload)
    return response


@patch("utils.agent_status.requests.get")
def test_ready(mock_get):
    mock_get.return_value = response_with({"value": {"ready": True, "message": "WebDriverAgent is ready"}})
    assert check_agent_status(STATUS_URL)
    mock_get.assert_called_once_with(STATUS_URL, timeout=5.0)


@patch("utils.agent_status.requests.get")
def test_not_ready_payloads(mock_get):
    for payload in ({"value": {"ready": False}}, {"value": "starting"}, {}, ["ready"]):
        mock_get.return_value = response_with(payload)
        assert not check_agent_status(STATUS_URL)


@patch("utils.agent_status.requests.get")
def test_connection_error(mock_get):
    mock_get.side_effect = requests.ConnectionError("refused")
    assert not check_agent_status(STATUS_URL)


@patch("utils.agent_status.requests.get")
def test_invalid_json(mock_get):
    response = response_with(None)
    response.json.side_effect = ValueError("not json")
    mock_get.return_value = response
    assert not check_agent_status(STATUS_URL)


@patch("utils.agent_status.check_agent_status")
def test_wait_for_agent_ready_polls(mock_check):
    mock_check.side_effect = [False, False, True]
    sleeps = []
    assert wait_for_agent_ready(STATUS_URL, attempts=15, interval=2.0, sleep=sleeps.append)
    assert mock_check.call_count == 3
    assert sleeps == [2.0, 2.0]


@patch("utils.agent_status.check_agent_status", return_value=False)
def test_wait_for_agent_ready_gives_up(mock_check):
    sleeps = []
    assert not wait_for_agent_ready(STATUS_URL, attempts=3, interval=2.0, sleep=sleeps.append)
    assert mock_check.call_count == 3
    assert sleeps == [2.0, 2.0]
