import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, cast

from .casts import CastDeclaration, cast_value, parse_cast
from .errors import PropertyNotAllowed, ValidationFailed
from .naming import WILDCARD, is_wildcard, names_match, resolve_property
from .validation import ValidatesProperties

logger = logging.getLogger(__name__)

_CONFIG_ATTRIBUTES = (
    "allowed_properties",
    "casts",
    "case_sensitive",
    "ignore_non_permitted_properties",
    "rules",
    "messages",
)


# --- Per-type configuration ---
@dataclass(frozen=True)
class DTOConfig:
    """Immutable configuration shared by every instance of a DTO type."""

    allowed_properties: Tuple[str, ...] = (WILDCARD,)
    casts: Mapping = field(default_factory=lambda: MappingProxyType({}))
    case_sensitive: bool = True
    ignore_non_permitted_properties: bool = False
    rules: Mapping = field(default_factory=lambda: MappingProxyType({}))
    messages: Mapping = field(default_factory=lambda: MappingProxyType({}))

    @property
    def allows_all_properties(self) -> bool:
        return is_wildcard(self.allowed_properties)


def _build_config(name: str, base: DTOConfig, options: Dict[str, Any]) -> DTOConfig:
    allowed = options.get("allowed_properties", base.allowed_properties)
    if isinstance(allowed, str):
        allowed = (allowed,)
    allowed = tuple(allowed)
    if not allowed or not all(isinstance(p, str) for p in allowed):
        raise TypeError(f"allowed_properties of {name} must be a non-empty list of strings.")
    wildcard = is_wildcard(allowed)

    casts: Dict[str, CastDeclaration] = {
        prop: kind
        for prop, kind in base.casts.items()
        if wildcard or prop in allowed
    }
    for prop, declaration in options.get("casts", {}).items():
        if not wildcard and prop not in allowed:
            raise NameError(f"Cast for non-existent property '{prop}'")
        casts[prop] = parse_cast(declaration)

    return DTOConfig(
        allowed_properties=allowed,
        casts=MappingProxyType(casts),
        case_sensitive=bool(options.get("case_sensitive", base.case_sensitive)),
        ignore_non_permitted_properties=bool(
            options.get("ignore_non_permitted_properties", base.ignore_non_permitted_properties)
        ),
        rules=MappingProxyType({**base.rules, **options.get("rules", {})}),
        messages=MappingProxyType({**base.messages, **options.get("messages", {})}),
    )


# --- Metaclass ---
class DTOMeta(type):
    """Metaclass for DTOs that turns configuration attributes into a DTOConfig."""

    def __new__(mcls, name: str, bases: tuple, namespace: dict) -> Any:
        base_config = DTOConfig()
        validators: Dict[str, List[Callable]] = {}
        for base in reversed(bases):
            if isinstance(getattr(base, "_config", None), DTOConfig):
                base_config = getattr(base, "_config")
            for field_name, funcs in getattr(base, "_validators", {}).items():
                validators.setdefault(field_name, []).extend(funcs)

        # Pop the configuration so it never shadows dynamic property access
        options = {k: namespace.pop(k) for k in _CONFIG_ATTRIBUTES if k in namespace}
        config = _build_config(name, base_config, options)

        for value in namespace.values():
            if hasattr(value, "_validator_for"):
                for field_name in getattr(value, "_validator_for"):
                    if not config.allows_all_properties and (
                        field_name not in config.allowed_properties
                    ):
                        raise NameError(
                            f"Validator for non-existent property '{field_name}'"
                        )
                    validators.setdefault(field_name, []).append(value)

        namespace.setdefault("__slots__", ())
        namespace["_config"] = config
        namespace["_validators"] = validators

        cls = super().__new__(mcls, name, bases, namespace)
        if validators and not issubclass(cls, ValidatesProperties):
            raise TypeError(
                f"{name} declares validators but does not mix in ValidatesProperties"
            )
        return cls


def _is_keyed(data: Any) -> bool:
    if isinstance(data, (str, bytes)):
        return False
    return hasattr(data, "keys") or isinstance(data, Iterable)


# --- Main DTO Class ---
class DataTransferObject(metaclass=DTOMeta):
    """Whitelisted, read-only property bag with read-time casting.

    Subclasses configure themselves with class attributes:

        class MovieDTO(DataTransferObject):
            allowed_properties = ["title", "released_on", "oscars"]
            casts = {"released_on": "date", "oscars": "integer"}
            case_sensitive = False

        movie = MovieDTO({"Title": "The Godfather", "releasedOn": "1972-03-24"})
        movie.released_on  # datetime.datetime(1972, 3, 24, 0, 0)
        MovieDTO("The Godfather", "1972-03-24", "3").oscars  # 3
    """

    __slots__ = ("_data",)

    _config: DTOConfig
    _validators: Dict[str, List[Callable]]

    allowed_properties = [WILDCARD]
    casts: Dict[str, Any] = {}
    case_sensitive = True
    ignore_non_permitted_properties = False
    rules: Dict[str, Any] = {}
    messages: Dict[str, str] = {}

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Populate a new DTO from a mapping, key/value pairs, positional values or keywords."""
        object.__setattr__(self, "_data", {})

        if len(args) == 1 and args[0] is None:
            args = ()
        if args:
            data, rest = args[0], args[1:]
            if not rest and _is_keyed(data):
                self._set_properties_from_iterable(data)
            else:
                self._set_properties_from_arguments(args)
        assigned = set(self._data)

        for name, value in kwargs.items():
            prop = self._whitelisted(name)
            if prop is None:
                continue
            if prop in assigned:
                raise TypeError(
                    f"Duplicate value for property '{prop}' in {self.__class__.__name__}. "
                    f"Properties can only be assigned once."
                )
            self._data[prop] = value

        if isinstance(self, ValidatesProperties):
            self._handle_validation()

    @classmethod
    def make(cls, *args: Any, **kwargs: Any) -> "DataTransferObject":
        return cls(*args, **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping) -> "DataTransferObject":
        """Create a DTO instance from a mapping."""
        if not isinstance(data, Mapping):
            raise TypeError(f"Expected mapping, got {type(data).__name__}")
        return cls(data)

    @classmethod
    def get_config(cls) -> DTOConfig:
        return cls._config

    # --- Population ---
    def _whitelisted(self, name: Any) -> Optional[str]:
        config = self._config
        prop = resolve_property(
            name,
            config.allowed_properties,
            case_sensitive=config.case_sensitive,
            ignore_non_permitted=config.ignore_non_permitted_properties,
        )
        if prop is None:
            logger.debug(
                "Ignoring non-permitted property %r for %s", name, self.__class__.__name__
            )
        return prop

    def _set_properties_from_iterable(self, data: Any) -> None:
        if hasattr(data, "keys"):
            pairs: Iterable = ((key, data[key]) for key in data.keys())
        else:
            pairs = data

        for pair in pairs:
            if not isinstance(pair, (tuple, list)) or len(pair) != 2:
                raise TypeError(
                    f"{self.__class__.__name__} expects a mapping, key/value pairs "
                    f"or positional values, got item {pair!r}"
                )
            prop = self._whitelisted(pair[0])
            if prop is not None:
                self._data[prop] = pair[1]

    def _set_properties_from_arguments(self, arguments: Tuple[Any, ...]) -> None:
        """Match positional values to properties in the order they are allowed."""
        if self._config.allows_all_properties:
            raise TypeError(
                f"{self.__class__.__name__} allows any property, so values cannot be "
                f"matched by position. Pass a mapping instead."
            )
        for name, value in zip(self._config.allowed_properties, arguments):
            self._data[name] = value

    def _handle_validation(self) -> None:
        outcome = cast(ValidatesProperties, self).validate(self.get_populated())
        if not outcome.valid:
            logger.debug("Validation failed for %s: %s", self.__class__.__name__, outcome.errors)
            raise ValidationFailed(outcome)

    # --- Reading ---
    def _locate(self, name: Any) -> Optional[str]:
        """Find the stored or whitelisted spelling of ``name``, ignoring case style."""
        config = self._config
        if name in self._data:
            return name
        if not isinstance(name, str):
            return None
        if config.allows_all_properties:
            candidates: Iterable = self._data.keys()
        else:
            if name in config.allowed_properties:
                return name
            candidates = config.allowed_properties

        for key in candidates:
            if isinstance(key, str) and names_match(name, key, case_sensitive=False):
                return key
        return None

    def _read(self, prop: str) -> Any:
        if prop not in self._data:
            return None
        return cast_value(prop, self._data[prop], self._config.casts.get(prop))

    def _lookup(self, name: Any) -> Any:
        prop = self._locate(name)
        if prop is not None:
            return self._read(prop)
        if self._config.allows_all_properties:
            return None
        raise PropertyNotAllowed(name, reading=True)

    def has(self, name: str) -> bool:
        """Check if a property has been populated."""
        prop = self._locate(name)
        return prop is not None and prop in self._data

    def get(self, name: str, default: Any = None) -> Any:
        """Return the cast value of a populated property, or ``default``."""
        prop = self._locate(name)
        if prop is None or prop not in self._data:
            return default
        return self._read(prop)

    def get_populated(self) -> Dict[Any, Any]:
        """Return only the populated properties, cast to their declared types."""
        return {prop: self._read(prop) for prop in self._data}

    def get_all(self, exclude_empty: bool = False) -> Dict[Any, Any]:
        """Return every property, cast, with unset whitelisted properties as None."""
        config = self._config
        values: Dict[Any, Any] = (
            {} if config.allows_all_properties else dict.fromkeys(config.allowed_properties)
        )
        values.update(self.get_populated())
        if exclude_empty:
            values = {k: v for k, v in values.items() if not _is_empty(v)}
        return values

    get_data = get_all
    to_dict = get_all

    def get_original(self) -> Dict[Any, Any]:
        """Return the raw, uncast values keyed by their whitelisted names."""
        return dict(self._data)

    get_raw = get_original

    def replace(self, **changes: Any) -> "DataTransferObject":
        """Create a new instance with some raw values changed."""
        data = dict(self._data)
        for name, value in changes.items():
            prop = self._locate(name)
            data[name if prop is None else prop] = value
        return self.__class__(data)

    # --- Dynamic access ---
    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(
                f"'{self.__class__.__name__}' object has no attribute '{name}'"
            )

        prop = self._locate(name)
        if prop is not None:
            return self._read(prop)

        target = _getter_target(name)
        if target is not None:
            prop = self._locate(target)
            if prop is not None:
                return lambda: self._read(prop)
            if self._config.allows_all_properties:
                return lambda: None

        if self._config.allows_all_properties:
            return None
        raise PropertyNotAllowed(name, reading=True)

    def __getitem__(self, name: str) -> Any:
        return self._lookup(name)

    def __contains__(self, name: object) -> bool:
        return self.has(cast(str, name))

    def keys(self) -> List[Any]:
        return list(self.get_all())

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Cannot modify read-only '{self.__class__.__name__}' instance")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"Cannot modify read-only '{self.__class__.__name__}' instance")

    # --- Equality and Representation ---
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __reduce__(self) -> Tuple[Any, ...]:
        return (self.__class__, (dict(self._data),))

    def __repr__(self) -> str:
        fields_str = ", ".join(f"{k}={v!r}" for k, v in self._data.items())
        return f"{self.__class__.__name__}({fields_str})"


def _getter_target(name: str) -> Optional[str]:
    """Return ``first_name`` for ``get_first_name`` and ``FirstName`` for ``getFirstName``."""
    if name.startswith("get_") and len(name) > 4:
        return name[4:]
    if name.startswith("get") and len(name) > 3 and name[3].isupper():
        return name[3:]
    return None


def _is_empty(value: Any) -> bool:
    if value is None or value == "":
        return True
    try:
        return len(value) == 0
    except TypeError:
        return False


class BaseDTO(DataTransferObject):
    """Base class for application DTOs."""
