"""
Map result columns onto object fields, tolerating underscores and case.

A column labelled ``user_id`` fills field ``userId`` (or ``userid``);
``USER_NAME`` fills ``username``. The mapping is computed once per result and
then reused for every row.
"""

import dataclasses
import inspect
from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel

from dbkit.core.errors import ConfigurationError

PROPERTY_NOT_FOUND = -1


class ResultMetadata(Protocol):
    """Column information for a result. Column indexes are 1-based."""

    def column_count(self) -> int: ...

    def column_label(self, column: int) -> str | None: ...

    def column_name(self, column: int) -> str | None: ...


class CursorMetadata:
    """ResultMetadata over a DB-API ``cursor.description``."""

    def __init__(self, cursor: Any) -> None:
        self._description = list(cursor.description or ())

    def column_count(self) -> int:
        return len(self._description)

    def column_label(self, column: int) -> str | None:
        return self._description[column - 1][0]

    def column_name(self, column: int) -> str | None:
        # DB-API exposes a single name per column
        return self._description[column - 1][0]


def normalize_column(label: str) -> str:
    return label.replace("_", "")


def map_columns_to_fields(metadata: ResultMetadata, fields: Sequence[str]) -> list[int]:
    """
    Return ``mapping`` where ``mapping[col]`` is the index in *fields* that
    column *col* fills, or PROPERTY_NOT_FOUND. ``mapping[0]`` is unused.

    The first matching field wins for a column. If several columns normalize
    to the same name, each of them maps to that field and the last one's
    value ends up in the object.
    """
    cols = metadata.column_count()
    mapping = [PROPERTY_NOT_FOUND] * (cols + 1)
    lowered = [f.lower() for f in fields]

    for col in range(1, cols + 1):
        column_name = metadata.column_label(col)
        if not column_name:
            column_name = metadata.column_name(col) or ""
        column_name = normalize_column(column_name).lower()

        for i, field in enumerate(lowered):
            if column_name == field:
                mapping[col] = i
                break

    return mapping


def field_names(target: Any) -> list[str]:
    """
    Ordered field names of *target*: a dataclass, a pydantic model, a class
    with annotations, or an explicit sequence of names.
    """
    if isinstance(target, (list, tuple)):
        return [str(f) for f in target]
    if dataclasses.is_dataclass(target):
        return [f.name for f in dataclasses.fields(target)]
    if isinstance(target, type) and issubclass(target, BaseModel):
        return list(target.model_fields)
    names: list[str] = []
    for klass in reversed(getattr(target, "__mro__", (type(target),))):
        for name in inspect.get_annotations(klass):
            if name not in names and not name.startswith("_"):
                names.append(name)
    return names


def _uses_keyword_init(target: type) -> bool:
    return dataclasses.is_dataclass(target) or issubclass(target, BaseModel)


def _required_fields(target: type) -> list[str]:
    """Fields a keyword-built *target* cannot be constructed without."""
    if dataclasses.is_dataclass(target):
        return [
            f.name
            for f in dataclasses.fields(target)
            if f.init
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        ]
    return [name for name, info in target.model_fields.items() if info.is_required()]


def to_objects(cursor: Any, target: type) -> list[Any]:
    """
    Fetch all rows from *cursor* and build one *target* instance per row.

    Dataclasses and pydantic models are built with keyword arguments; other
    classes are created with no arguments and filled with ``setattr``.
    Columns that match no field are ignored; fields that match no column keep
    their defaults. Raises ConfigurationError if a required field of a
    keyword-built target matches no column.
    """
    fields = field_names(target)
    mapping = map_columns_to_fields(CursorMetadata(cursor), fields)
    keyword_init = _uses_keyword_init(target)
    if keyword_init:
        mapped = {fields[i] for i in mapping[1:] if i != PROPERTY_NOT_FOUND}
        missing = [f for f in _required_fields(target) if f not in mapped]
        if missing:
            raise ConfigurationError(
                f"No column matches required field(s) {missing} of {target.__name__}"
            )

    objects = []
    for row in cursor.fetchall():
        values: dict[str, Any] = {}
        for col, index in enumerate(mapping[1:], start=1):
            if index != PROPERTY_NOT_FOUND:
                values[fields[index]] = row[col - 1]
        if keyword_init:
            objects.append(target(**values))
        else:
            obj = target()
            for name, value in values.items():
                setattr(obj, name, value)
            objects.append(obj)
    return objects
