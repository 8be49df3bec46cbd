"""Read-time value casting for DTO properties.

A cast declaration is parsed once, when the DTO class is defined, into either a
:class:`CastKind` member or a custom cast (a class or instance exposing a
one-argument ``cast`` method). :func:`cast_value` then dispatches on that
parsed declaration every time a property is read.

Example:
    class Uppercase(CastsProperties):
        def cast(self, value):
            return str(value).upper()

    cast_value("title", "The Godfather", parse_cast(Uppercase))
    # 'THE GODFATHER'
"""

import dataclasses
import datetime
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from dateutil import parser as date_parser

from .errors import CastError, InvalidDateFormat


class CastKind(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    ARRAY = "array"
    DATE = "date"
    COLLECTION = "collection"


_KIND_ALIASES: Dict[Any, CastKind] = {
    "bool": CastKind.BOOLEAN,
    "int": CastKind.INTEGER,
    "double": CastKind.FLOAT,
    bool: CastKind.BOOLEAN,
    int: CastKind.INTEGER,
    float: CastKind.FLOAT,
    str: CastKind.STRING,
    list: CastKind.ARRAY,
    dict: CastKind.ARRAY,
    datetime.date: CastKind.DATE,
    datetime.datetime: CastKind.DATE,
}

_TRUTHY = frozenset({"1", "true", "on", "yes"})


class CastsProperties(ABC):
    """Interface for custom casts.

    Implementations must be instantiable without arguments.
    """

    @abstractmethod
    def cast(self, value: Any) -> Any:
        """Transform a raw property value."""


class Collection(Sequence):
    """Immutable ordered collection produced by the ``collection`` cast."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items = tuple(items)

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return Collection(self._items[index])
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Collection):
            return self._items == other._items
        if isinstance(other, (list, tuple)):
            return self._items == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"Collection({list(self._items)!r})"

    def all(self) -> List[Any]:
        return list(self._items)

    def first(self, default: Any = None) -> Any:
        return self._items[0] if self._items else default

    def map(self, func: Callable[[Any], Any]) -> "Collection":
        return Collection(func(item) for item in self._items)

    def filter(self, func: Optional[Callable[[Any], Any]] = None) -> "Collection":
        if func is None:
            return Collection(item for item in self._items if item)
        return Collection(item for item in self._items if func(item))


CastDeclaration = Union[CastKind, CastsProperties, type]


def _is_custom_cast(declaration: Any) -> bool:
    if isinstance(declaration, type) and issubclass(declaration, CastsProperties):
        return True
    return callable(getattr(declaration, "cast", None)) and not isinstance(
        declaration, (str, CastKind)
    )


def parse_cast(declaration: Any) -> Optional[CastDeclaration]:
    """Parse a cast declaration into a :class:`CastKind` or a custom cast."""
    if declaration is None or isinstance(declaration, CastKind):
        return declaration
    if _is_custom_cast(declaration):
        return declaration
    if isinstance(declaration, str):
        try:
            return CastKind(declaration.lower())
        except ValueError:
            pass
        declaration = declaration.lower()
    try:
        return _KIND_ALIASES[declaration]
    except (KeyError, TypeError):
        raise TypeError(f"Unknown cast type: {declaration!r}") from None


def cast_value(property_name: str, value: Any, kind: Optional[CastDeclaration]) -> Any:
    """Cast ``value`` of ``property_name`` according to a parsed declaration."""
    if kind is None:
        return value
    if isinstance(kind, CastKind):
        return _CASTERS[kind](property_name, value)
    return _custom_cast(property_name, value, kind)


def _custom_cast(property_name: str, value: Any, cast: Any) -> Any:
    try:
        caster = cast() if isinstance(cast, type) else cast
        return caster.cast(value)
    except Exception as exc:
        raise CastError(property_name, "type", value, include_value=False) from exc


def _to_boolean(property_name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, bytes):
        value = value.decode("utf-8", "replace")
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return False


def _to_integer(property_name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return int(value)
    try:
        if isinstance(value, (float, Decimal)):
            return int(value)
        if isinstance(value, (str, bytes)):
            text = value.strip()
            try:
                return int(text)
            except ValueError:
                return int(float(text))
    except (ValueError, OverflowError):
        pass
    raise CastError(property_name, CastKind.INTEGER.value, value)


def _to_float(property_name: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float, Decimal, str, bytes)):
        try:
            return float(value)
        except ValueError:
            pass
    raise CastError(property_name, CastKind.FLOAT.value, value)


def _has_own_str(value: Any) -> bool:
    return type(value).__str__ is not object.__str__


def _to_string(property_name: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            raise CastError(property_name, CastKind.STRING.value, value, include_value=False)
    if isinstance(value, (int, float, complex, Decimal)):
        return str(value)
    if isinstance(value, (Mapping, list, tuple, set, frozenset)) or not _has_own_str(value):
        raise CastError(property_name, CastKind.STRING.value, value, include_value=False)
    return str(value)


def _to_array(property_name: str, value: Any) -> Union[list, dict]:
    if value is None:
        return []
    if isinstance(value, Collection):
        return value.all()
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    if isinstance(value, (str, bytes, int, float, Decimal)):
        return [value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    if callable(getattr(value, "to_dict", None)):
        return value.to_dict()
    if hasattr(value, "__dict__") and not callable(value):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    raise CastError(property_name, CastKind.ARRAY.value, value)


def parse_date(value: Any) -> Optional[datetime.date]:
    """Parse a date-like value, raising ``ValueError`` when it is not one."""
    if value is None:
        return None
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return date_parser.parse(value)
        except OverflowError as exc:
            raise ValueError(str(exc)) from exc
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(str(exc)) from exc
    raise ValueError(f"{type(value).__name__} is not a date")


def _to_date(property_name: str, value: Any) -> Optional[datetime.date]:
    try:
        return parse_date(value)
    except (ValueError, UnicodeDecodeError) as exc:
        raise InvalidDateFormat(property_name, value) from exc


def _to_collection(property_name: str, value: Any) -> Collection:
    if value is None:
        return Collection()
    if isinstance(value, Collection):
        return value
    if isinstance(value, Mapping):
        value = value.values()
    elif isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return Collection([value])
    try:
        return Collection(value)
    except Exception as exc:
        raise CastError(
            property_name, CastKind.COLLECTION.value, value, include_value=False
        ) from exc


_CASTERS: Dict[CastKind, Callable[[str, Any], Any]] = {
    CastKind.BOOLEAN: _to_boolean,
    CastKind.INTEGER: _to_integer,
    CastKind.FLOAT: _to_float,
    CastKind.STRING: _to_string,
    CastKind.ARRAY: _to_array,
    CastKind.DATE: _to_date,
    CastKind.COLLECTION: _to_collection,
}
