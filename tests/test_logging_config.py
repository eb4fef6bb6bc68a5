import logging

from inkroute.utils.logging_config import get_logger, setup_logging


def test_sdk_loggers_are_quieted(make_config):
    setup_logging(make_config())
    assert logging.getLogger('botocore').level == logging.WARNING
    assert logging.getLogger('urllib3').level == logging.WARNING


def test_get_logger_uses_configured_level(make_config):
    assert get_logger('inkroute.tests', make_config()).level == logging.DEBUG


def test_unknown_level_falls_back_to_info(make_config):
    app_config = make_config()
    app_config.log_level = 'chatty'
    assert get_logger('inkroute.tests.unknown', app_config).level == logging.INFO
