"""Tests for the PprintLogger and setup_logging functionality.

This module verifies:
- Dicts are pretty-printed, strings pass through unchanged
- pprint=False uses simple string conversion
- Pydantic models use model_dump_json()
- Messages below the logger level are not formatted or emitted
- setup_logging() names loggers after the calling module and honours
  WDGRAPH_LOG_LEVEL and an explicit level
"""

import logging
from io import StringIO

import pytest
from pydantic import BaseModel

from wdgraph.logging import PprintLogger, _level_from_env, setup_logging


@pytest.fixture
def captured() -> tuple[PprintLogger, StringIO]:
    logger = logging.getLogger("wdgraph.tests.captured")
    logger.setLevel(logging.DEBUG)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    logger.addHandler(handler)
    yield PprintLogger(logger), stream
    logger.removeHandler(handler)


class SampleModel(BaseModel):
    name: str
    depth: int


class TestPprintLogger:
    """Tests for message formatting and level gating."""

    def test_formats_dict(self, captured) -> None:
        """Test that dict messages are pretty-printed."""
        logger, stream = captured
        logger.debug({"message": "expanding", "frontier": ["Q5", "Q729"]})

        output = stream.getvalue()
        assert "'frontier': ['Q5', 'Q729']" in output
        assert "'message': 'expanding'" in output

    def test_string_unchanged(self, captured) -> None:
        """Test that string messages pass through unchanged."""
        logger, stream = captured
        logger.info("plain text")
        assert stream.getvalue() == "plain text\n"

    def test_pprint_false_uses_str(self, captured) -> None:
        """Test that pprint=False uses str()."""
        logger, stream = captured
        logger.warning({"key": "value"}, pprint=False)
        assert stream.getvalue() == "{'key': 'value'}\n"

    def test_pydantic_model(self, captured) -> None:
        """Test that pydantic models are dumped as JSON."""
        logger, stream = captured
        logger.error(SampleModel(name="Q42", depth=2))

        output = stream.getvalue()
        assert '"name": "Q42"' in output
        assert '"depth": 2' in output

    def test_below_level_not_emitted(self, captured) -> None:
        """Test that messages below the logger level are dropped."""
        logger, stream = captured
        logger.setLevel(logging.WARNING)
        logger.debug({"hidden": True})
        assert stream.getvalue() == ""

    def test_exception_includes_traceback(self, captured) -> None:
        """Test that exception() attaches the traceback."""
        logger, stream = captured
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logger.exception("failed")
        output = stream.getvalue()
        assert "failed" in output
        assert "RuntimeError: boom" in output

    def test_delegates_attributes(self, captured) -> None:
        logger, _ = captured
        assert logger.name == "wdgraph.tests.captured"
        assert logger.isEnabledFor(logging.DEBUG)


class TestSetupLogging:
    """Tests for logger naming and level selection."""

    def test_named_after_calling_module(self) -> None:
        """Test that the logger is named after the calling module."""
        logger = setup_logging()
        assert logger.name == f"wdgraph.{__name__}"

    def test_package_modules_keep_their_name(self) -> None:
        """Test that package modules are not prefixed twice."""
        from wdgraph import hierarchy

        assert hierarchy.logger.name == "wdgraph.hierarchy"

    def test_explicit_level_applies_to_package(self) -> None:
        """Test that an explicit level is set on the package logger."""
        root = logging.getLogger("wdgraph")
        previous = root.level
        try:
            setup_logging(logging.DEBUG)
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("", logging.WARNING),
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("10", 10),
            ("nonsense", logging.WARNING),
        ],
    )
    def test_level_from_env(self, monkeypatch: pytest.MonkeyPatch, raw: str, expected: int) -> None:
        """Test level names, numbers and junk in WDGRAPH_LOG_LEVEL."""
        monkeypatch.setenv("WDGRAPH_LOG_LEVEL", raw)
        assert _level_from_env() == expected
