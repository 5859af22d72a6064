"""Filter-graph clause composition.

Optional features (crop, deinterlace, volume, ...) each contribute one
clause to an ffmpeg filter chain. A FilterSpec describes a clause
declaratively: its parameter values, which values switch it off, and a
template. Templates carry their own leading separator so rendered clauses
can simply be concatenated; normalize_filter() then trims the ends.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

SEPARATOR = ","


@dataclass(frozen=True)
class FilterSpec:
    """Declarative description of one filter clause.

    Placeholders in the template are written ``{0}``, ``{1}``, ... and refer
    to ``params`` by position.

    Example:
        FilterSpec(
            params=(1280, 720),
            disable_values=((None,), (None,)),
            template=",scale={0}:{1}",
        )
    """

    params: Sequence[Any] = ()
    disable_values: Sequence[Sequence[Any]] = ()
    """Per-parameter values that suppress the whole clause."""
    template: str = ""
    verbatim: bool = False
    """Use the template as-is, without checks or substitution."""
    name: str = field(default="", compare=False)


def _matches(value: Any, sentinel: Any) -> bool:
    # Booleans and None only match themselves: 0 must not disable a
    # clause whose sentinel is False.
    if isinstance(sentinel, bool) or isinstance(value, bool):
        return value is sentinel
    if sentinel is None or value is None:
        return value is sentinel
    return value == sentinel


def is_disabled(value: Any, sentinels: Iterable[Any]) -> bool:
    """True if a parameter value is one of its disable sentinels."""
    return any(_matches(value, sentinel) for sentinel in sentinels)


def _to_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def elaborate_filter(spec: FilterSpec) -> str:
    """Render a filter clause.

    Args:
        spec: The clause description.

    Returns:
        The rendered clause including its leading separator, or an empty
        string if any parameter holds one of its disable values.
    """
    if spec.verbatim:
        return spec.template

    rendered = spec.template
    for index, value in enumerate(spec.params):
        sentinels = ()
        if index < len(spec.disable_values):
            sentinels = spec.disable_values[index]
        if is_disabled(value, sentinels):
            return ""
        rendered = rendered.replace(f"{{{index}}}", _to_text(value))
    return rendered


def normalize_filter(fragment: str, separator: str = SEPARATOR) -> str:
    """Strip leading and trailing separators from a filter chain.

    Repeats until neither end holds a separator, which also removes the
    runs left behind by clauses that rendered empty.
    """
    start = 0
    end = len(fragment)
    while start < end and fragment.startswith(separator, start, end):
        start += len(separator)
    while end > start and fragment.endswith(separator, start, end):
        end -= len(separator)
    return fragment[start:end]


def compose_filters(specs: Iterable[FilterSpec], prefix: str = "") -> str:
    """Concatenate rendered clauses after ``prefix`` (not normalized)."""
    return prefix + "".join(elaborate_filter(spec) for spec in specs)
