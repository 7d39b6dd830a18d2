"""Tests for ceno.logger."""

import json

from ceno.codes import ErrorCode
from ceno.config import LogLevel
from ceno.logger import CenoLogger, code_fields, configure_logger, get_logger


def _records(stderr: str) -> list[dict]:
    return [json.loads(line) for line in stderr.splitlines() if line.strip()]


class TestCodeFields:
    def test_known_cc_code(self):
        assert code_fields(ErrorCode.ERR_NO_CONFIG) == {
            "code": 1100,
            "code_name": "ERR_NO_CONFIG",
            "origin": "cc",
        }

    def test_lcs_code(self):
        fields = code_fields(2301)
        assert fields["code_name"] == "ERR_LCS_WAIT_PEERS"
        assert fields["origin"] == "lcs"

    def test_unknown_code(self):
        assert code_fields(9999) == {"code": 9999, "code_name": "UNKNOWN_9999", "origin": "other"}

    def test_no_code(self):
        assert code_fields(None) == {}


class TestCenoLogger:
    def test_json_shape(self, capsys):
        logger = CenoLogger(name="test.ceno.shape")
        logger.warn("Unrecognized error code", code=9999, stage="render", url="http://x")

        (record,) = _records(capsys.readouterr().err)
        assert record["level"] == "warning"
        assert record["message"] == "Unrecognized error code"
        assert record["logger"] == "test.ceno.shape"
        assert record["code"] == 9999
        assert record["code_name"] == "UNKNOWN_9999"
        assert record["origin"] == "other"
        assert record["stage"] == "render"
        assert record["data"] == {"url": "http://x"}
        assert "timestamp" in record

    def test_handler_is_top_level(self, capsys):
        logger = CenoLogger(name="test.ceno.handler", level=LogLevel.DEBUG)
        logger.debug("Dispatching lcs error", code=2301, stage="dispatch", handler="serve_error")

        (record,) = _records(capsys.readouterr().err)
        assert record["level"] == "debug"
        assert record["origin"] == "lcs"
        assert record["handler"] == "serve_error"
        assert "data" not in record

    def test_optional_fields_omitted(self, capsys):
        logger = CenoLogger(name="test.ceno.bare")
        logger.info("hello")

        (record,) = _records(capsys.readouterr().err)
        for field in ("code", "code_name", "origin", "stage", "handler", "data"):
            assert field not in record

    def test_level_filters(self, capsys):
        logger = CenoLogger(name="test.ceno.level", level=LogLevel.ERROR)
        logger.info("dropped")
        logger.error("kept")

        records = _records(capsys.readouterr().err)
        assert [r["message"] for r in records] == ["kept"]

    def test_event_takes_level(self, capsys):
        logger = CenoLogger(name="test.ceno.event")
        logger.event(LogLevel.ERROR, "explicit", stage="serve")

        (record,) = _records(capsys.readouterr().err)
        assert record["level"] == "error"
        assert record["stage"] == "serve"

    def test_non_serializable_data(self, capsys):
        logger = CenoLogger(name="test.ceno.data")
        logger.info("object", thing=object())

        (record,) = _records(capsys.readouterr().err)
        assert record["data"]["thing"].startswith("<object")


class TestGlobalLogger:
    def test_configure_replaces_global(self):
        configured = configure_logger(LogLevel.DEBUG)
        assert get_logger() is configured
