"""Declarative parameter resolution for tool calls.

Each tool declares a table of ParamSpec entries. A single resolver walks the
table and, for every parameter, takes the first usable value from its
permitted sources in order, then the default, and fails only if the
parameter is required and still unresolved.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from gsheets_mcp.errors import MissingParameter

DEFAULT_SHEET = "Sheet1"
DEFAULT_RANGE = "A1:ZZ"
DEFAULT_MAJOR_DIMENSION = "ROWS"


class Source(str, Enum):
    """Where a parameter value may come from."""

    ARGUMENTS = "arguments"
    CONTEXT = "context"


_UNSET: Any = object()


def as_str(value: Any) -> Any:
    return value if isinstance(value, str) else _UNSET


def as_int(value: Any) -> Any:
    # bool is an int subclass; reject it like any other non-integer.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return _UNSET
    return value


def as_list(value: Any) -> Any:
    return value if isinstance(value, list) else _UNSET


@dataclass(frozen=True)
class ParamSpec:
    """Resolution rule for a single parameter.

    Attributes:
        name: Key looked up in each source.
        sources: Sources to consult, highest priority first.
        required: Fail with MissingParameter when nothing resolves.
        default: Used after every source has been checked.
        coerce: Returns the accepted value, or ``_UNSET`` to treat the
            source as not having supplied the parameter.
    """

    name: str
    sources: tuple[Source, ...] = (Source.ARGUMENTS,)
    required: bool = False
    default: Any = None
    coerce: Callable[[Any], Any] = as_str


def resolve_params(
    specs: Sequence[ParamSpec],
    arguments: Mapping[str, Any],
    context: Mapping[str, Any],
) -> dict[str, Any]:
    """Resolve every declared parameter of a tool.

    Args:
        specs: The tool's parameter table.
        arguments: Per-call arguments.
        context: Session-scoped request metadata.

    Returns:
        Mapping of parameter name to effective value (None when optional and
        unresolved without a default).

    Raises:
        MissingParameter: For the first required parameter with no value.
    """
    by_source = {Source.ARGUMENTS: arguments, Source.CONTEXT: context}
    resolved: dict[str, Any] = {}

    for spec in specs:
        value = _UNSET
        for source in spec.sources:
            candidate = by_source[source].get(spec.name)
            if candidate is None:
                continue
            value = spec.coerce(candidate)
            if value is not _UNSET:
                break

        if value is _UNSET:
            if spec.default is not None:
                value = spec.default
            elif spec.required:
                raise MissingParameter(spec.name)
            else:
                value = None

        resolved[spec.name] = value

    return resolved


def a1_range(sheet: str, cell_range: str) -> str:
    """Join a sheet name and a cell range into A1 notation."""
    return f"{sheet}!{cell_range}"


def coerce_values(values: list[Any]) -> list[list[Any]]:
    """Normalize a 2-D cell block supplied by the caller.

    Rows that are not arrays become empty rows. Cells that are not strings
    (numbers, booleans, null, nested values) become empty strings.
    """
    rows = []
    for row in values:
        if not isinstance(row, list):
            rows.append([])
            continue
        rows.append([cell if isinstance(cell, str) else "" for cell in row])
    return rows


# Reusable parameter declarations

SPREADSHEET_ID = ParamSpec("spreadsheet_id", sources=(Source.CONTEXT,), required=True)

MAJOR_DIMENSION = ParamSpec(
    "major_dimension",
    sources=(Source.ARGUMENTS, Source.CONTEXT),
    default=DEFAULT_MAJOR_DIMENSION,
)
