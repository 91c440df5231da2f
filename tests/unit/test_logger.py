import logging

from loguru import logger
from pytest_mock.plugin import MockerFixture

from lnscan.settings import Settings
from lnscan.utils.logger import Formatter, InterceptHandler, configure_logger


def test_configure_logger(mocker: MockerFixture, settings: Settings):
    settings.debug = False
    settings.enable_log_to_file = False
    remove = mocker.patch.object(logger, "remove")
    add = mocker.patch.object(logger, "add")

    configure_logger()

    remove.assert_called_once()
    add.assert_called_once()
    assert add.call_args.kwargs["level"] == "INFO"
    for name in ("httpx", "httpcore", "dns"):
        assert isinstance(logging.getLogger(name).handlers[0], InterceptHandler)
        assert logging.getLogger(name).propagate is False


def test_configure_logger_to_file(
    mocker: MockerFixture, settings: Settings, tmp_path
):
    settings.debug = True
    settings.enable_log_to_file = True
    settings.log_folder = str(tmp_path)
    mocker.patch.object(logger, "remove")
    add = mocker.patch.object(logger, "add")

    configure_logger()

    assert add.call_count == 3
    levels = [call.kwargs["level"] for call in add.call_args_list]
    assert levels == ["DEBUG", "INFO", "DEBUG"]
    assert add.call_args_list[1].args[0] == tmp_path / "lnscan.log"
    assert add.call_args_list[2].args[0] == tmp_path / "debug.log"


def test_formatter():
    verbose = Formatter(verbose=True)
    assert verbose.format({"extra": {}}) == verbose.fmt
    assert "{function}" in verbose.fmt
    assert verbose.format({"extra": {"stdlib": "httpx"}}) == verbose.intercepted_fmt

    minimal = Formatter()
    assert "{function}" not in minimal.fmt
    assert minimal.format({"extra": {}}) == minimal.fmt


def test_intercept_handler():
    messages = []
    sink_id = logger.add(messages.append, format="{extra[stdlib]}|{message}")
    try:
        record = logging.LogRecord(
            "httpx", logging.WARNING, __file__, 1, "HTTP %s", ("error",), None
        )
        InterceptHandler().emit(record)
    finally:
        logger.remove(sink_id)

    assert [str(message).strip() for message in messages] == ["httpx|HTTP error"]
    assert messages[0].record["level"].name == "WARNING"
