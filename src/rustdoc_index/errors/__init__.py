"""Exception hierarchy and Problem Details support.

Examples
--------
>>> from rustdoc_index.errors import ErrorCode, RustdocIndexError
>>> error = RustdocIndexError("Operation failed", code=ErrorCode.RUNTIME_ERROR)
>>> error.to_problem_details()["code"]
'runtime-error'
"""

from __future__ import annotations

from rustdoc_index.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from rustdoc_index.errors.exceptions import (
    MalformedIndex,
    MalformedIndexError,
    RustdocIndexError,
    SettingsError,
)

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "MalformedIndex",
    "MalformedIndexError",
    "RustdocIndexError",
    "SettingsError",
    "get_type_uri",
]
