"""Parse-recovery cascade for JSON arrays embedded in free-form LLM output.

Models asked for "a JSON array only" still wrap it in markdown fences,
prefix it with commentary, or drop the outer brackets.  Each strategy below
is a pure ``str -> list | None`` function; :data:`DEFAULT_STRATEGIES` tries
them in order and the first to return a non-empty array of JSON objects
wins.  Strategies never raise.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable

RecoveryStrategy = Callable[[str], "list[dict[str, Any]] | None"]

# First fenced block (```json or bare ```) whose body is a bracketed array.
_FENCED_ARRAY_RE = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```")
_FENCE_MARKER_RE = re.compile(r"```(?:json)?")

_decoder = json.JSONDecoder()


def _as_records(value: Any) -> list[dict[str, Any]] | None:
    """Return *value* if it is a non-empty list of JSON objects, else ``None``."""
    if isinstance(value, list) and value and all(isinstance(item, dict) for item in value):
        return value
    return None


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Tiers
# ---------------------------------------------------------------------------

def parse_direct(text: str) -> list[dict[str, Any]] | None:
    """Tier 1: the whole response is the array."""
    return _as_records(_loads(text.strip()))


def parse_fenced_array(text: str) -> list[dict[str, Any]] | None:
    """Tier 2: the first markdown code fence holding a bracketed array."""
    match = _FENCED_ARRAY_RE.search(text)
    if match is None:
        return None
    return _as_records(_loads(match.group(1)))


def parse_first_array(text: str) -> list[dict[str, Any]] | None:
    """Tier 3: the first bracketed substring that decodes to an array of objects.

    Each ``[`` is tried as the start of a complete JSON value so nested
    arrays (e.g. quiz options) are bounded correctly; prose brackets such
    as ``[1]`` are skipped.
    """
    start = text.find("[")
    while start != -1:
        try:
            value, _ = _decoder.raw_decode(text, start)
        except (json.JSONDecodeError, ValueError):
            value = None
        records = _as_records(value)
        if records is not None:
            return records
        start = text.find("[", start + 1)
    return None


def parse_object_span(text: str) -> list[dict[str, Any]] | None:
    """Tier 4: everything from the first ``{`` to the last ``}`` minus fences.

    A lone object becomes a one-element array; comma-separated objects
    missing their enclosing brackets are read as an array.
    """
    first = text.find("{")
    last = text.rfind("}")
    if first == -1 or last < first:
        return None

    body = _FENCE_MARKER_RE.sub("", text[first : last + 1]).strip()
    value = _loads(body)
    if isinstance(value, dict):
        return [value]
    if value is None:
        value = _loads(f"[{body}]")
    return _as_records(value)


DEFAULT_STRATEGIES: tuple[tuple[str, RecoveryStrategy], ...] = (
    ("direct", parse_direct),
    ("fenced_array", parse_fenced_array),
    ("first_array", parse_first_array),
    ("object_span", parse_object_span),
)


def recover_json_array(
    text: str,
    strategies: tuple[tuple[str, RecoveryStrategy], ...] = DEFAULT_STRATEGIES,
) -> tuple[str, list[dict[str, Any]]] | None:
    """Run *strategies* in order over *text*.

    Returns
    -------
    tuple[str, list[dict]] | None
        The winning strategy's name and its records, or ``None`` when every
        tier fails.
    """
    for name, strategy in strategies:
        records = strategy(text)
        if records:
            return name, records
    return None
