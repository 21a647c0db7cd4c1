"""Error code registry and type URIs for Problem Details.

Codes are stable kebab-case identifiers used in RFC 9457 Problem Details
payloads emitted by the CLI and by :meth:`RustdocIndexError.to_problem_details`.

Examples
--------
>>> from rustdoc_index.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.MALFORMED_INDEX)
'https://rustdoc-index.dev/problems/malformed-index'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]


BASE_TYPE_URI: Final[str] = "https://rustdoc-index.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes for rustdoc-index exceptions.

    Attributes
    ----------
    MALFORMED_INDEX
        The search index payload violates its structural invariants.
    CONFIGURATION_ERROR
        Settings failed validation.
    FILE_OPERATION_ERROR
        The index file could not be read or written.
    RUNTIME_ERROR
        Unclassified failure.
    """

    MALFORMED_INDEX = "malformed-index"
    CONFIGURATION_ERROR = "configuration-error"
    FILE_OPERATION_ERROR = "file-operation-error"
    RUNTIME_ERROR = "runtime-error"

    def __str__(self) -> str:
        """Return the code value as a string.

        Returns
        -------
        str
            The error code value (e.g., "malformed-index").
        """
        return self.value


def get_type_uri(code: ErrorCode) -> str:
    """Get the RFC 9457 type URI for an error code.

    Parameters
    ----------
    code : ErrorCode
        Error code enum value.

    Returns
    -------
    str
        Complete type URI (e.g., "https://rustdoc-index.dev/problems/malformed-index").
    """
    return f"{BASE_TYPE_URI}/{code.value}"
