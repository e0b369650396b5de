"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from cdpgen.domain.errors import CacheWriteError, MissingKeyError
from cdpgen.services.result import (
    FetchFailure,
    ServiceError,
    ServiceResult,
    SourceSummary,
    dump_rows,
)


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="generate", data={"domains": 2})
        assert result.ok is True
        assert result.op == "generate"
        assert result.data == {"domains": 2}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="MISSING_KEY", message="Missing key `name`")
        result = ServiceResult(ok=False, op="generate", error=error)
        assert result.ok is False
        assert result.error is not None
        assert result.error.code == "MISSING_KEY"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="inspect", data={"version": "1.3"}, meta={"n": 1})
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["version"] == "1.3"
        assert parsed["meta"]["n"] == 1

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="fetch")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestServiceError:
    def test_with_detail(self) -> None:
        error = ServiceError(
            code="SCHEMA_PARSE",
            message="Invalid JSON",
            detail={"source": "protocol.json"},
        )
        assert error.detail["source"] == "protocol.json"

    def test_from_exception_carries_position(self) -> None:
        exc = MissingKeyError("name", "command", location="$.domains[0].commands[1]")
        exc.source = "protocol.json"
        error = ServiceError.from_exception(exc)
        assert error.code == "MISSING_KEY"
        assert error.message == "Missing key `name` from command declaration"
        assert error.detail == {
            "location": "$.domains[0].commands[1]",
            "source": "protocol.json",
        }

    def test_from_exception_keeps_explicit_detail(self) -> None:
        exc = CacheWriteError("Cannot cache", location="https://x.test/a.json")
        error = ServiceError.from_exception(exc, location="override", path="c/a.json")
        assert error.detail == {"location": "override", "path": "c/a.json"}


class TestFail:
    def test_builds_error_result(self) -> None:
        result = ServiceResult.fail(
            "generate", "WRITE_FAILED", "Cannot write out.rs", warnings=["w"], path="out.rs"
        )
        assert not result.ok
        assert result.op == "generate"
        assert result.warnings == ["w"]
        assert result.error == ServiceError(
            code="WRITE_FAILED", message="Cannot write out.rs", detail={"path": "out.rs"}
        )


class TestPayloadRows:
    def test_dump_rows(self) -> None:
        rows = dump_rows(
            [SourceSummary(location="a.json", origin="file", bytes=3)]
        )
        assert rows == [{"location": "a.json", "origin": "file", "bytes": 3}]

    def test_origin_is_checked(self) -> None:
        with pytest.raises(ValidationError):
            SourceSummary(location="a.json", origin="ftp", bytes=3)  # type: ignore[arg-type]

    def test_fetch_failure_from_exception(self) -> None:
        exc = CacheWriteError("Cannot cache u", location="u")
        assert FetchFailure.from_exception("u", exc).model_dump() == {
            "url": "u",
            "code": "CACHE_WRITE_FAILED",
            "message": "Cannot cache u",
        }
