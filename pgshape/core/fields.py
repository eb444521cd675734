"""Allow-list helpers for table-level statement generation."""

from __future__ import annotations

import re
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Iterable, Optional, Tuple, Type

FieldSet = Tuple[str, ...]

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")


def check_identifier(name: str) -> str:
    """Return `name` if it is a plain unquoted SQL identifier.

    Column names are interpolated into statement text, so anything else
    (spaces, quotes, parentheses, `;`) is rejected.
    """

    if not isinstance(name, str) or not name:
        raise TypeError("Column names must be non-empty strings.")
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid column name: {name!r}")
    return name


def field_set(names: Iterable[str]) -> FieldSet:
    """Normalize column names into an ordered allow-list without duplicates."""

    if isinstance(names, str):
        raise TypeError("field_set() expects an iterable of column names, not a string.")

    ordered: list[str] = []
    for name in names:
        check_identifier(name)
        if name not in ordered:
            ordered.append(name)
    return tuple(ordered)


def model_field_set(model: Type[Any], *, exclude: Iterable[str] = ()) -> FieldSet:
    """Build an allow-list from dataclass field names in declaration order.

    Fields declared with `metadata={"writable": False}` are left out, as are
    names listed in `exclude`.
    """

    if not is_dataclass(model):
        raise TypeError(f"{getattr(model, '__name__', model)!r} must be a dataclass.")
    skipped = set(exclude)
    return field_set(
        f.name
        for f in fields(model)
        if f.name not in skipped and f.metadata.get("writable", True)
    )


@dataclass(frozen=True)
class Table:
    """Trusted table name bundled with its write allow-list.

    `name` is interpolated into SQL as-is and must come from application code,
    never from user input. `fields` must be given: an empty set allows no
    column, and `None` explicitly allows every record key.
    """

    name: str
    fields: Optional[FieldSet]
    pkey: str = "id"
    touch_column: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Table name must be a non-empty string.")
        if self.fields is not None:
            object.__setattr__(self, "fields", field_set(self.fields))
        check_identifier(self.pkey)
        if self.touch_column is not None:
            check_identifier(self.touch_column)

    @classmethod
    def for_model(
        cls,
        model: Type[Any],
        *,
        name: Optional[str] = None,
        pkey: str = "id",
        touch_column: Optional[str] = None,
    ) -> Table:
        """Describe a table from a dataclass model.

        The primary key and touch column are never writable from a record.
        """

        table = name or getattr(model, "__table__", None) or model.__name__.lower()
        excluded = [pkey] + ([touch_column] if touch_column else [])
        return cls(
            name=table,
            fields=model_field_set(model, exclude=excluded),
            pkey=pkey,
            touch_column=touch_column,
        )

    def __str__(self) -> str:
        return self.name
