"""Filtering and sorting descriptions attached to fetch queries.

A FilterSpec is pure data: the page source decides how to translate it into
a REST query string, a SQL clause or a document-store query. The engine only
uses it to tell queries apart when addressing the cache.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FilterOperator(str, Enum):
    """The common comparison operators understood by most backends."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    CONTAINS = "contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IS_IN = "is_in"
    IS_NOT_IN = "is_not_in"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"

    @property
    def code(self) -> str:
        return self.value


class CustomOperation(BaseModel):
    """Backend specific operation that has no FilterOperator equivalent.

    The code is opaque to pageflow and handed to the page source verbatim.

    Examples:
        >>> CustomOperation(code="array-contains")  # Firestore
        >>> CustomOperation(code="ILIKE")  # PostgreSQL
    """

    model_config = ConfigDict(frozen=True)

    code: str = Field(min_length=1)


FilterOperation = FilterOperator | CustomOperation


def operation_code(operation: FilterOperation) -> str:
    """Serialisable identity of an operation.

    Custom codes are prefixed so that a custom "equals" never collides with
    the built-in operator of the same name.
    """
    if isinstance(operation, CustomOperation):
        return f"custom:{operation.code}"
    return operation.code


class FilterField(BaseModel):
    """A single predicate applied to one field.

    Attributes:
        field: Name of the field to filter on.
        value: Value compared against. Any type the backend understands
            (lists for membership, datetimes for ranges, ...).
        operation: Comparison to apply. Defaults to equality.

    Examples:
        >>> FilterField(field="status", value="active")
        >>> FilterField(field="price", value=100, operation=FilterOperator.GREATER_THAN)
        >>> FilterField.custom("tags", "python", "array-contains")
    """

    model_config = ConfigDict(frozen=True)

    field: str
    value: Any = None
    operation: FilterOperation = FilterOperator.EQUALS

    @classmethod
    def equals(cls, field: str, value: Any) -> "FilterField":
        return cls(field=field, value=value)

    @classmethod
    def custom(cls, field: str, value: Any, code: str) -> "FilterField":
        return cls(field=field, value=value, operation=CustomOperation(code=code))

    def to_map(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "value": self.value,
            "operation": operation_code(self.operation),
        }


class SortField(BaseModel):
    """Sort order on one field. Earlier sort fields take priority."""

    model_config = ConfigDict(frozen=True)

    field: str
    descending: bool = False

    def to_map(self) -> dict[str, Any]:
        return {"field": self.field, "order": "desc" if self.descending else "asc"}


class FilterSpec(BaseModel):
    """Ordered filters plus ordered sort keys.

    Two specs are equal when their filters and sorts are element-wise equal,
    in the same order. Equal specs always derive the same cache key.

    Examples:
        >>> spec = FilterSpec(
        ...     filters=[
        ...         FilterField(field="status", value="active"),
        ...         FilterField(field="price", value=100, operation=FilterOperator.GREATER_THAN),
        ...     ],
        ...     sorts=[SortField(field="created_at", descending=True)],
        ... )
    """

    model_config = ConfigDict(frozen=True)

    filters: tuple[FilterField, ...] = ()
    sorts: tuple[SortField, ...] = ()

    @classmethod
    def empty(cls) -> "FilterSpec":
        return cls()

    def to_map(self) -> dict[str, Any]:
        """Ordered, JSON-compatible structure used for cache addressing."""
        return {
            "filters": [f.to_map() for f in self.filters],
            "sorts": [s.to_map() for s in self.sorts],
        }
