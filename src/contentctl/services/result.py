"""The value every public service method returns.

Services never raise to their callers: a missing record, an invalid
payload, or a failed write all come back as ``ok=False`` with a
:class:`ServiceError` whose ``code`` is one of the content error codes
(``NOT_FOUND``, ``VALIDATION_FAILED``, ``DUPLICATE_SLUG``, ...).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ServiceError(BaseModel):
    """Machine-readable error: a stable ``code``, a message, and extra detail.

    For validation failures ``detail["errors"]`` lists every violation.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    ``op`` names the operation (``create_article``, ``add_lesson``).
    ``data`` carries the payload on success and ``error`` the failure.
    ``warnings`` collect non-fatal problems such as a skipped slug in a
    bulk update. ``meta`` holds the ``--verbose`` telemetry tree.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
