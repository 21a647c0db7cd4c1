"""Typed exception hierarchy with Problem Details support.

All rustdoc-index exceptions inherit from :class:`RustdocIndexError`, which
carries a stable error code, a status, a log level and a context mapping.

Examples
--------
>>> from rustdoc_index.errors import ErrorCode, MalformedIndexError
>>> try:
...     raise MalformedIndexError("t and n differ in length", crate="demo")
... except MalformedIndexError as e:
...     assert e.code == ErrorCode.MALFORMED_INDEX
...     assert e.context["crate"] == "demo"
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, cast

from rustdoc_index.errors.codes import ErrorCode, get_type_uri
from rustdoc_index.problem_details import build_problem_details

if TYPE_CHECKING:
    from rustdoc_index.problem_details import JsonValue, ProblemDetails

__all__ = [
    "MalformedIndex",
    "MalformedIndexError",
    "RustdocIndexError",
    "SettingsError",
]


class RustdocIndexError(Exception):
    """Base exception for all rustdoc-index errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Error code enum value. Defaults to ``ErrorCode.RUNTIME_ERROR``.
    http_status : int, optional
        Status used in Problem Details payloads. Defaults to 500.
    log_level : int, optional
        Level used when the error is logged. Defaults to ``logging.ERROR``.
    cause : Exception | None, optional
        Underlying exception. Defaults to None.
    context : Mapping[str, object] | None, optional
        Additional context for error details. Defaults to None.

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Error code enum value.
    http_status : int
        Status code for Problem Details payloads.
    log_level : int
        Logging level for error logging.
    context : dict[str, object]
        Additional context dictionary for error details.
    """

    def __init__(  # noqa: PLR0913
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.RUNTIME_ERROR,
        http_status: int = 500,
        log_level: int = logging.ERROR,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status
        self.log_level = log_level
        self.context = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    def to_problem_details(
        self,
        instance: str | None = None,
        title: str | None = None,
    ) -> ProblemDetails:
        """Convert to RFC 9457 Problem Details JSON.

        Parameters
        ----------
        instance : str | None, optional
            URI identifying the specific occurrence. Defaults to None.
        title : str | None, optional
            Short summary. Defaults to the exception class name.

        Returns
        -------
        ProblemDetails
            Problem Details object with type, title, status, detail, code,
            instance, and optional extensions.
        """
        return build_problem_details(
            problem_type=get_type_uri(self.code),
            title=title or self.__class__.__name__,
            status=self.http_status,
            detail=self.message,
            instance=instance or "urn:rustdoc-index:error",
            code=self.code.value,
            extensions=cast(
                "Mapping[str, JsonValue] | None", self.context if self.context else None
            ),
        )

    def __str__(self) -> str:
        """Return formatted error string.

        Returns
        -------
        str
            Formatted error string (e.g., "MalformedIndexError[malformed-index]: ...").
        """
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class MalformedIndexError(RustdocIndexError):
    """Search index payload violates its structural invariants.

    Raised for undecodable payloads, wrongly typed fields, parallel arrays of
    differing length and out-of-range parent references.

    Parameters
    ----------
    message : str
        Description of the violated invariant.
    cause : Exception | None, optional
        Underlying decode or validation error. Defaults to None.
    **context : object
        Location details such as ``crate``, ``field`` and ``position``.
    """

    def __init__(self, message: str, cause: Exception | None = None, **context: object) -> None:
        super().__init__(
            message,
            code=ErrorCode.MALFORMED_INDEX,
            http_status=422,
            cause=cause,
            context=context,
        )

    @property
    def crate(self) -> str | None:
        """Crate whose record triggered the error, when known."""
        crate = self.context.get("crate")
        return crate if isinstance(crate, str) else None


MalformedIndex = MalformedIndexError


class SettingsError(RustdocIndexError):
    """Settings failed validation.

    Parameters
    ----------
    message : str
        Validation failure description.
    cause : Exception | None, optional
        Underlying pydantic error. Defaults to None.
    context : Mapping[str, object] | None, optional
        Additional context. Defaults to None.
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            http_status=500,
            cause=cause,
            context=context,
        )
