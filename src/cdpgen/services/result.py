"""ServiceResult, ServiceError, and the typed payloads services report.

Every service method returns a :class:`ServiceResult`. Rows that appear
inside ``data`` or ``error.detail`` (loaded sources, fetched cache
files, failed URLs) are built from the small frozen models below and
dumped to plain dicts, so the JSON output and the Rich renderers see
one fixed shape per row.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, Field

from cdpgen.domain.errors import BindgenError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: BindgenError, **detail: Any) -> ServiceError:
        """Carry a core error's code, message, and position into a payload.

        ``location`` and ``source`` come from the exception unless the
        caller already supplied them in *detail*.
        """
        if exc.location:
            detail.setdefault("location", exc.location)
        if exc.source:
            detail.setdefault("source", exc.source)
        return cls(code=exc.code, message=exc.message, detail=detail)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"generate"``, ``"inspect"``, ``"fetch"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def fail(
        cls,
        op: str,
        code: str,
        message: str,
        *,
        warnings: Iterable[str] = (),
        **detail: Any,
    ) -> ServiceResult:
        """Shorthand for an error result with an inline :class:`ServiceError`."""
        return cls(
            ok=False,
            op=op,
            warnings=list(warnings),
            error=ServiceError(code=code, message=message, detail=detail),
        )


# --- Payload rows ---


class SourceSummary(BaseModel):
    """One schema document consumed by ``generate``."""

    model_config = {"frozen": True}

    location: str
    origin: Literal["file", "remote", "cache"]
    bytes: int


class FetchedSource(BaseModel):
    """One URL stored in the cache by ``fetch``."""

    model_config = {"frozen": True}

    url: str
    bytes: int
    path: str


class FetchFailure(BaseModel):
    """One URL ``fetch`` could not download or could not cache."""

    model_config = {"frozen": True}

    url: str
    code: str
    message: str

    @classmethod
    def from_exception(cls, url: str, exc: BindgenError) -> FetchFailure:
        return cls(url=url, code=exc.code, message=exc.message)


def dump_rows(rows: Iterable[BaseModel]) -> list[dict[str, Any]]:
    return [row.model_dump() for row in rows]
