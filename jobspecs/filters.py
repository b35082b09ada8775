"""
Filter expression tree.

A filter is an immutable description of a predicate over job records. It is
built by specs.py and lowered into a native query by a persistence adapter
(see query.py for the SQLAlchemy one). Nothing here performs I/O.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Iterator, Tuple, Union

from .database import JobStatus


class FilterTypeError(TypeError):
    """Raised when a filter node is built with a value of the wrong type."""
    pass


class Attribute(enum.Enum):
    """Job attributes a filter can reference, with their declared value type."""

    ID = ("id", str)
    NAME = ("name", str)
    USER = ("user", str)
    STATUS = ("status", JobStatus)
    CLUSTER_NAME = ("cluster_name", str)
    CLUSTER_ID = ("cluster_id", str)
    COMMAND_NAME = ("command_name", str)
    COMMAND_ID = ("command_id", str)
    TAGS = ("tags", str)
    UPDATED = ("updated", datetime)

    def __init__(self, field: str, value_type: type):
        self.field = field
        self.value_type = value_type

    @property
    def orderable(self) -> bool:
        return self.value_type is datetime


def _check_value(attribute: Attribute, value: Any) -> None:
    if not isinstance(attribute, Attribute):
        raise FilterTypeError(f"Not a job attribute: {attribute!r}")
    if not isinstance(value, attribute.value_type):
        raise FilterTypeError(
            f"{attribute.name} expects {attribute.value_type.__name__}, "
            f"got {type(value).__name__}"
        )


@dataclass(frozen=True)
class TrueFilter:
    """Matches every record."""


@dataclass(frozen=True)
class Equals:
    attribute: Attribute
    value: Any

    def __post_init__(self):
        _check_value(self.attribute, self.value)


@dataclass(frozen=True)
class LessThan:
    attribute: Attribute
    value: Any

    def __post_init__(self):
        _check_value(self.attribute, self.value)
        if not self.attribute.orderable:
            raise FilterTypeError(f"{self.attribute.name} is not orderable")


@dataclass(frozen=True)
class Like:
    """Wildcard match; ``%`` in the pattern matches any run of characters."""

    attribute: Attribute
    pattern: str

    def __post_init__(self):
        _check_value(self.attribute, self.pattern)
        if self.attribute.value_type is not str:
            raise FilterTypeError(f"{self.attribute.name} is not a string attribute")


@dataclass(frozen=True)
class And:
    terms: Tuple["Filter", ...]

    def __post_init__(self):
        # Accept any iterable but store a tuple so the node stays hashable
        object.__setattr__(self, "terms", tuple(self.terms))


@dataclass(frozen=True)
class Or:
    terms: Tuple["Filter", ...]

    def __post_init__(self):
        object.__setattr__(self, "terms", tuple(self.terms))


Filter = Union[TrueFilter, Equals, LessThan, Like, And, Or]

MATCH_ALL = TrueFilter()


def all_of(terms: Iterable[Filter]) -> Filter:
    """Conjunction of ``terms``; no terms means match everything."""
    terms = tuple(terms)
    if not terms:
        return MATCH_ALL
    return And(terms)


def any_of(terms: Iterable[Filter]) -> Filter:
    return Or(tuple(terms))


def walk(expr: Filter) -> Iterator[Filter]:
    """Yield ``expr`` and all of its descendants, depth first."""
    yield expr
    if isinstance(expr, (And, Or)):
        for term in expr.terms:
            yield from walk(term)
