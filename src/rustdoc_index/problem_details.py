"""RFC 9457 Problem Details helpers.

Examples
--------
>>> from rustdoc_index.problem_details import build_problem_details, render_problem
>>> problem = build_problem_details(
...     problem_type="https://rustdoc-index.dev/problems/malformed-index",
...     title="MalformedIndexError",
...     status=422,
...     detail="parallel arrays differ in length",
...     instance="urn:rustdoc-index:parse",
... )
>>> render_problem(problem).startswith("{")
True
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TypedDict, cast

__all__ = [
    "JsonPrimitive",
    "JsonValue",
    "ProblemDetails",
    "build_problem_details",
    "render_problem",
]

JsonPrimitive = str | int | float | bool | None
JsonValue = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]


class ProblemDetails(TypedDict, total=False):
    """TypedDict for RFC 9457 Problem Details payloads.

    All fields are optional at the type level; :func:`build_problem_details`
    always fills ``type``, ``title``, ``status``, ``detail`` and ``instance``.
    """

    type: str
    title: str
    status: int
    detail: str
    instance: str
    code: str
    extensions: dict[str, JsonValue]


def build_problem_details(
    problem_type: str,
    title: str,
    status: int,
    detail: str,
    instance: str,
    *,
    code: str | None = None,
    extensions: Mapping[str, JsonValue] | None = None,
) -> ProblemDetails:
    """Build an RFC 9457 Problem Details payload.

    Parameters
    ----------
    problem_type : str
        Type URI identifying the problem class.
    title : str
        Short, human-readable summary.
    status : int
        HTTP-style status code.
    detail : str
        Human-readable explanation of this occurrence.
    instance : str
        URI identifying this occurrence.
    code : str | None, optional
        Stable error code. Defaults to None.
    extensions : Mapping[str, JsonValue] | None, optional
        Additional members. Defaults to None.

    Returns
    -------
    ProblemDetails
        Problem Details payload.

    Raises
    ------
    TypeError
        If ``status`` is not an integer.
    """
    if isinstance(status, bool) or not isinstance(status, int):
        message = f"status must be an int, got {type(status).__name__}"
        raise TypeError(message)
    payload: dict[str, object] = {
        "type": problem_type,
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance,
    }
    if code is not None:
        payload["code"] = code
    if extensions:
        payload["extensions"] = dict(extensions)
    return cast("ProblemDetails", payload)


def render_problem(problem: ProblemDetails | Mapping[str, object]) -> str:
    """Render Problem Details as a minified JSON string.

    Parameters
    ----------
    problem : ProblemDetails | Mapping[str, object]
        Problem Details payload to serialize.

    Returns
    -------
    str
        JSON text without a trailing newline; non-ASCII characters are kept.
    """
    return json.dumps(dict(problem), ensure_ascii=False, sort_keys=True, default=str)
