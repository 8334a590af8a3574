"""Format-neutral record model.

A ``Record`` is one ingestible row: an ordered mapping from column name to a
tagged scalar ``Value``. Format adapters produce records, the schema resolver
and SQL builder consume them. The tag of a value is decided once, when the
value is constructed, and is never coerced afterwards.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class ValueKind(str, Enum):
    """Tags of the scalar union a Record column may hold."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BYTES = "bytes"


_PAYLOAD_TYPES = {
    ValueKind.NULL: type(None),
    ValueKind.BOOLEAN: bool,
    ValueKind.INTEGER: int,
    ValueKind.FLOAT: float,
    ValueKind.TEXT: str,
    ValueKind.BYTES: bytes,
}


@dataclass(frozen=True)
class Value:
    """Tagged scalar value.

    Attributes:
        kind: The tag, fixed at construction
        payload: The Python object carried for that tag

    Example:
        >>> Value.of(3)
        Value(kind=<ValueKind.INTEGER: 'integer'>, payload=3)
        >>> Value.of(True).kind
        <ValueKind.BOOLEAN: 'boolean'>
    """

    kind: ValueKind
    payload: Any = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[self.kind]
        # bool is a subclass of int; keep the two tags apart
        if self.kind is ValueKind.INTEGER and isinstance(self.payload, bool):
            raise TypeError("Integer value cannot carry a bool payload")
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.kind.value} value requires {expected.__name__} payload, "
                f"got {type(self.payload).__name__}"
            )
        if self.kind is ValueKind.FLOAT and math.isnan(self.payload):
            # SQLite stores NaN as NULL, which would silently change the tag
            raise ValueError("Float value cannot be NaN; map missing values to null")

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueKind.NULL, None)

    @classmethod
    def boolean(cls, payload: bool) -> "Value":
        return cls(ValueKind.BOOLEAN, payload)

    @classmethod
    def integer(cls, payload: int) -> "Value":
        return cls(ValueKind.INTEGER, payload)

    @classmethod
    def float_(cls, payload: float) -> "Value":
        return cls(ValueKind.FLOAT, payload)

    @classmethod
    def text(cls, payload: str) -> "Value":
        return cls(ValueKind.TEXT, payload)

    @classmethod
    def bytes_(cls, payload: bytes) -> "Value":
        return cls(ValueKind.BYTES, payload)

    @classmethod
    def of(cls, obj: Any) -> "Value":
        """Build a Value from a native Python scalar.

        ``bool`` is checked before ``int``; ``bytearray`` and ``memoryview``
        are frozen to ``bytes``. NaN is rejected because it cannot be stored as a
        float; adapters decide whether it means a missing value.

        Raises:
            TypeError: If ``obj`` is not one of the supported scalar types
            ValueError: If ``obj`` is a NaN float
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls.null()
        if isinstance(obj, bool):
            return cls.boolean(obj)
        if isinstance(obj, int):
            return cls.integer(obj)
        if isinstance(obj, float):
            return cls.float_(obj)
        if isinstance(obj, str):
            return cls.text(obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls.bytes_(bytes(obj))
        raise TypeError(
            f"Unsupported value type {type(obj).__name__}; adapters must map "
            "it onto null/boolean/integer/float/text/bytes"
        )

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def to_python(self) -> Any:
        """Return the object handed to the database driver."""
        return self.payload


NULL = Value.null()


def _check_column_name(name: Any) -> str:
    if not isinstance(name, str) or not name:
        raise ValueError(f"Column name must be a non-empty string, got {name!r}")
    return name


@dataclass(frozen=True)
class Record(Mapping):
    """Immutable, ordered mapping of column name to Value.

    Example:
        >>> record = Record.from_mapping({"a": 1, "b": "x"})
        >>> list(record)
        ['a', 'b']
        >>> record["a"].payload
        1
    """

    _items: Tuple[Tuple[str, Value], ...] = ()
    _index: Mapping[str, Value] = field(default=None, repr=False, compare=False)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        index: dict[str, Value] = {}
        for name, value in self._items:
            _check_column_name(name)
            if name in index:
                raise ValueError(f"Duplicate column name {name!r} in record")
            if not isinstance(value, Value):
                raise TypeError(f"Column {name!r} must hold a Value, got {value!r}")
            index[name] = value
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, Any]]) -> "Record":
        """Build a Record from (name, value) pairs, rejecting duplicate names."""
        return cls(tuple((name, Value.of(value)) for name, value in pairs))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Record":
        """Build a Record from a mapping, preserving its key order."""
        return cls.from_pairs(mapping.items())

    def __getitem__(self, key: str) -> Value:
        return self._index[key]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        body = ", ".join(f"{name}={value.payload!r}" for name, value in self._items)
        return f"Record({body})"

    @property
    def columns(self) -> Tuple[str, ...]:
        return tuple(name for name, _ in self._items)

    def get_value(self, column: str) -> Value:
        """Return the column's Value, or NULL when the column is absent."""
        return self._index.get(column, NULL)

    def to_python(self) -> dict[str, Any]:
        """Plain dict view, used for failure export and logging."""
        return {name: value.to_python() for name, value in self._items}


@dataclass(frozen=True)
class TableTarget:
    """Destination table plus, optionally, its known column list.

    With ``columns`` set, every record must use a subset of them and the list
    order is the insertion order. Without it, the column list is the ordered
    union of keys seen in each batch.
    """

    name: str
    columns: Optional[Tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if self.columns is not None:
            columns = tuple(self.columns)
            if len(set(columns)) != len(columns):
                raise ValueError(f"Duplicate column in target {self.name!r}: {columns}")
            object.__setattr__(self, "columns", columns)

    @property
    def has_known_columns(self) -> bool:
        return self.columns is not None


@dataclass(frozen=True)
class InsertStatement:
    """SQL text plus the Values bound to its placeholders, in order.

    ``row_indices`` records which source rows the statement covers so the
    loader can attribute failures and count committed rows.
    """

    sql: str
    params: Tuple[Value, ...]
    row_indices: Tuple[int, ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.row_indices) or 1

    def bound_parameters(self) -> Tuple[Any, ...]:
        return tuple(value.to_python() for value in self.params)


def is_missing(obj: Any) -> bool:
    """True for None and float NaN, the two spellings of "no value" in tabular data."""
    return obj is None or (isinstance(obj, float) and math.isnan(obj))


def records_from_dicts(rows: Iterable[Mapping[str, Any]]) -> Iterator[Record]:
    """Lazily convert plain dict rows into Records."""
    for row in rows:
        yield Record.from_mapping(row)
