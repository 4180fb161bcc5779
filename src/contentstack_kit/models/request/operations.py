"""Filter operations, logical operators and reference operators.

An :class:`Operation` is a closed set of variants; each maps to exactly
one operator key of the query language, except ``equals`` which is
rendered as the bare value.

Example:
    >>> Operation.is_less_than(100).wire_value
    {'$lt': 100}
    >>> Operation.equals("Gold").wire_value
    'Gold'
"""

import copy
from collections.abc import Sequence
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from pydantic import BaseModel, ConfigDict

from ..enums import QueryOperator
from .encoding import encode_filter, format_datetime

if TYPE_CHECKING:
    from .query import BaseQuery

Scalar = Union[str, int, float, bool, date]


class OperationKind(str, Enum):
    """Variants of :class:`Operation`."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    INCLUDES = "includes"
    EXCLUDES = "excludes"
    IS_LESS_THAN = "is_less_than"
    IS_LESS_THAN_OR_EQUAL = "is_less_than_or_equal"
    IS_GREATER_THAN = "is_greater_than"
    IS_GREATER_THAN_OR_EQUAL = "is_greater_than_or_equal"
    EXISTS = "exists"
    MATCHES = "matches"
    BELOW = "below"
    EQ_BELOW = "eq_below"
    ABOVE = "above"
    EQ_ABOVE = "eq_above"


_OPERATOR_KEYS: dict[OperationKind, QueryOperator | None] = {
    OperationKind.EQUALS: None,
    OperationKind.NOT_EQUALS: QueryOperator.NE,
    OperationKind.INCLUDES: QueryOperator.IN,
    OperationKind.EXCLUDES: QueryOperator.NIN,
    OperationKind.IS_LESS_THAN: QueryOperator.LT,
    OperationKind.IS_LESS_THAN_OR_EQUAL: QueryOperator.LTE,
    OperationKind.IS_GREATER_THAN: QueryOperator.GT,
    OperationKind.IS_GREATER_THAN_OR_EQUAL: QueryOperator.GTE,
    OperationKind.EXISTS: QueryOperator.EXISTS,
    OperationKind.MATCHES: QueryOperator.REGEX,
    OperationKind.BELOW: QueryOperator.BELOW,
    OperationKind.EQ_BELOW: QueryOperator.EQ_BELOW,
    OperationKind.ABOVE: QueryOperator.ABOVE,
    OperationKind.EQ_ABOVE: QueryOperator.EQ_ABOVE,
}


def _render_scalar(value: Scalar) -> Any:
    # Numbers and booleans keep their JSON type, everything else becomes text
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, date):
        return format_datetime(value)
    return str(value)


def _value_list(values: Sequence[Scalar]) -> list[Scalar]:
    if isinstance(values, (str, bytes)):
        raise TypeError(f"Expected a sequence of values, got a string: {values!r}")
    return list(values)


class Operation(BaseModel):
    """A single filter operation on a field.

    Build instances with the named constructors rather than directly.
    """

    kind: OperationKind
    value: Any
    options: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def operator(self) -> QueryOperator | None:
        """Operator key, or ``None`` for ``equals``."""
        return _OPERATOR_KEYS[self.kind]

    @property
    def rendered_value(self) -> Any:
        """Payload as it appears in the JSON filter."""
        if isinstance(self.value, (list, tuple)):
            return [_render_scalar(v) for v in self.value]
        return _render_scalar(self.value)

    @property
    def wire_value(self) -> Any:
        """Constraint stored at the field path of the filter."""
        if self.operator is None:
            return self.rendered_value
        constraint: dict[str, Any] = {self.operator.value: self.rendered_value}
        if self.options:
            constraint["$options"] = self.options
        return constraint

    # Named constructors

    @classmethod
    def equals(cls, value: Scalar) -> "Operation":
        return cls(kind=OperationKind.EQUALS, value=value)

    @classmethod
    def not_equals(cls, value: Scalar) -> "Operation":
        return cls(kind=OperationKind.NOT_EQUALS, value=value)

    @classmethod
    def includes(cls, values: Sequence[Scalar]) -> "Operation":
        """Field value is one of ``values``.

        Raises:
            TypeError: If ``values`` is a string rather than a sequence of values
        """
        return cls(kind=OperationKind.INCLUDES, value=_value_list(values))

    @classmethod
    def excludes(cls, values: Sequence[Scalar]) -> "Operation":
        """Field value is none of ``values``.

        Raises:
            TypeError: If ``values`` is a string rather than a sequence of values
        """
        return cls(kind=OperationKind.EXCLUDES, value=_value_list(values))

    @classmethod
    def is_less_than(cls, value: Scalar) -> "Operation":
        return cls(kind=OperationKind.IS_LESS_THAN, value=value)

    @classmethod
    def is_less_than_or_equal(cls, value: Scalar) -> "Operation":
        return cls(kind=OperationKind.IS_LESS_THAN_OR_EQUAL, value=value)

    @classmethod
    def is_greater_than(cls, value: Scalar) -> "Operation":
        return cls(kind=OperationKind.IS_GREATER_THAN, value=value)

    @classmethod
    def is_greater_than_or_equal(cls, value: Scalar) -> "Operation":
        return cls(kind=OperationKind.IS_GREATER_THAN_OR_EQUAL, value=value)

    @classmethod
    def exists(cls, value: bool = True) -> "Operation":
        return cls(kind=OperationKind.EXISTS, value=bool(value))

    @classmethod
    def matches(cls, pattern: str, options: str | None = None) -> "Operation":
        """Regular expression match; ``options`` is passed as ``$options`` (e.g. ``"i"``)."""
        return cls(kind=OperationKind.MATCHES, value=pattern, options=options)

    @classmethod
    def below(cls, term: str) -> "Operation":
        """Taxonomy terms strictly below ``term`` in the hierarchy."""
        return cls(kind=OperationKind.BELOW, value=term)

    @classmethod
    def eq_below(cls, term: str) -> "Operation":
        """Taxonomy ``term`` and all terms below it."""
        return cls(kind=OperationKind.EQ_BELOW, value=term)

    @classmethod
    def above(cls, term: str) -> "Operation":
        """Taxonomy terms strictly above ``term`` in the hierarchy."""
        return cls(kind=OperationKind.ABOVE, value=term)

    @classmethod
    def eq_above(cls, term: str) -> "Operation":
        """Taxonomy ``term`` and all terms above it."""
        return cls(kind=OperationKind.EQ_ABOVE, value=term)


class Operator:
    """Logical combination of sub-queries (``$and`` / ``$or``).

    Only the filter trees of the sub-queries are combined; their URI
    parameters are ignored.
    """

    def __init__(self, operator: QueryOperator, queries: Sequence["BaseQuery"]) -> None:
        if operator not in (QueryOperator.AND, QueryOperator.OR):
            raise ValueError(f"Not a logical operator: {operator}")
        self.operator = operator
        self.queries = list(queries)

    @classmethod
    def and_(cls, queries: Sequence["BaseQuery"]) -> "Operator":
        return cls(QueryOperator.AND, queries)

    @classmethod
    def or_(cls, queries: Sequence["BaseQuery"]) -> "Operator":
        return cls(QueryOperator.OR, queries)

    @property
    def key(self) -> str:
        return self.operator.value

    @property
    def value(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(query.filter_parameters) for query in self.queries]


class Reference:
    """Reference search: entries whose reference field matches a sub-query.

    The sub-query's filter is embedded as rendered JSON under ``$in`` or
    ``$nin``.
    """

    def __init__(self, operator: QueryOperator, query: "BaseQuery") -> None:
        if operator not in (QueryOperator.IN, QueryOperator.NIN):
            raise ValueError(f"Not a reference operator: {operator}")
        self.operator = operator
        self.query = query

    @classmethod
    def include(cls, query: "BaseQuery") -> "Reference":
        return cls(QueryOperator.IN, query)

    @classmethod
    def not_include(cls, query: "BaseQuery") -> "Reference":
        return cls(QueryOperator.NIN, query)

    @property
    def key(self) -> str:
        return self.operator.value

    @property
    def value(self) -> str:
        return encode_filter(self.query.filter_parameters)
