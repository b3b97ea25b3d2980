import logging

import pytest

from utils.logger import SensitiveDataFilter, log_duration, log_step, mask_sensitive_data


@pytest.mark.parametrize("raw, expected", [
    ("password=hunter2", "password=******"),
    ('{"password": "hunter2"}', '{"password": "******"}'),
    ("cvv: 123", "cvv: ***"),
    ("login standard_user / secret_sauce", "login standard_user / ******"),
    ("card 4111111111111111 accepted", "card 4111********1111 accepted"),
    ("card 378282246310005", "card 3782********0005"),
    ("mail test.user42@example.com", "mail ***@example.com"),
])
def test_mask_sensitive_data(raw, expected):
    assert mask_sensitive_data(raw) == expected


def test_phone_numbers_are_not_cards():
    assert mask_sensitive_data("phone 4155550100") == "phone 4155550100"


def test_non_strings_pass_through():
    assert mask_sensitive_data(42) == 42


def test_filter_masks_message_and_args():
    record = logging.LogRecord("automation.test", logging.INFO, __file__, 1,
                               "login %s with %s", ("standard_user", "secret_sauce"), None)
    assert SensitiveDataFilter().filter(record)
    assert record.getMessage() == "login standard_user with ******"


def test_filter_masks_sensitive_dict_keys():
    f = SensitiveDataFilter()
    assert f._sanitize_dict({"card_number": "4111", "name": "Ada"}) == {"card_number": "******", "name": "Ada"}


def test_log_step_reraises():
    test_logger = logging.getLogger("log_step_test")

    @log_step("explode", logger=test_logger)
    def explode():
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        explode()


def test_log_step_returns_result(caplog):
    test_logger = logging.getLogger("log_step_test_ok")

    @log_step("add", logger=test_logger)
    def add(a, b):
        return a + b

    with caplog.at_level(logging.INFO, logger="log_step_test_ok"):
        assert add(2, 3) == 5
    assert "Step completed: add" in caplog.text


def test_log_duration_runs_body():
    ran = []
    with log_duration("body"):
        ran.append(True)
    assert ran == [True]
