"""Construction-time validation for DTOs.

A DTO opts in by mixing in :class:`ValidatesProperties`:

    class MovieDTO(DataTransferObject, ValidatesProperties):
        allowed_properties = ["title", "released"]
        rules = {"title": "required|string|max:255"}

        @validator("title")
        def not_fight_club(self, value):
            if value == "Fight Club":
                raise ValueError("You do not talk about Fight Club.")

The populated data is handed to a :class:`Validator` collaborator together with
the declared rules and messages, field validators and the
``after_validation`` hook may add further errors, and any error aborts
construction with :class:`~flexible_dto.errors.ValidationFailed`.
"""

import datetime
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Type, Union

from .casts import Collection, parse_date

RuleExpression = Union[str, Sequence[str]]

DEFAULT_MESSAGES: Dict[str, str] = {
    "required": "The {attribute} property is required.",
    "string": "The {attribute} property must be a string.",
    "integer": "The {attribute} property must be an integer.",
    "numeric": "The {attribute} property must be a number.",
    "boolean": "The {attribute} property must be true or false.",
    "array": "The {attribute} property must be an array.",
    "date": "The {attribute} property is not a valid date.",
    "email": "The {attribute} property must be a valid email address.",
    "min": "The {attribute} property must be at least {param}.",
    "max": "The {attribute} property may not be greater than {param}.",
    "in": "The selected {attribute} is invalid.",
}

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_BOOLEAN_VALUES = (True, False, 0, 1, "0", "1", "true", "false")


def validator(*field_names: str) -> Callable:
    """Decorator to mark a DTO method as a validator for one or more properties."""
    if not all(isinstance(name, str) for name in field_names):
        raise TypeError("validator field names must be strings.")

    def decorator(func: Callable) -> Callable:
        setattr(func, "_validator_for", field_names)
        return func

    return decorator


class ValidationOutcome:
    """Errors collected for a DTO, keyed by property name."""

    def __init__(self, errors: Optional[Dict[str, List[str]]] = None) -> None:
        self.errors: Dict[str, List[str]] = {k: list(v) for k, v in (errors or {}).items()}

    @property
    def valid(self) -> bool:
        return not any(self.errors.values())

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def merge(self, other: "ValidationOutcome") -> None:
        for field, messages in other.errors.items():
            for message in messages:
                self.add(field, message)

    def first(self, field: Optional[str] = None) -> Optional[str]:
        """Return the first error message, optionally for a single field."""
        if field is not None:
            messages = self.errors.get(field) or []
            return messages[0] if messages else None
        for messages in self.errors.values():
            if messages:
                return messages[0]
        return None

    def __repr__(self) -> str:
        return f"ValidationOutcome({self.errors!r})"


class Validator(ABC):
    """Collaborator that checks populated DTO data against rules."""

    @abstractmethod
    def validate(
        self,
        data: Mapping,
        rules: Mapping[str, RuleExpression],
        messages: Optional[Mapping[str, str]] = None,
    ) -> ValidationOutcome:
        ...


def _parse_rules(expression: RuleExpression) -> List[Tuple[str, Optional[str]]]:
    parts = expression.split("|") if isinstance(expression, str) else list(expression)
    parsed = []
    for part in parts:
        part = part.strip()
        if not part:
            continue
        name, _, param = part.partition(":")
        parsed.append((name.strip().lower(), param.strip() if param else None))
    return parsed


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (Mapping, list, tuple, set, frozenset, Collection)):
        return len(value) == 0
    return False


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def _size(value: Any) -> Optional[float]:
    if _is_number(value):
        return float(value)
    try:
        return len(value)
    except TypeError:
        return None


class RuleValidator(Validator):
    """Default validator for pipe-delimited rule expressions.

    Supported rules: ``required``, ``nullable``, ``string``, ``integer``,
    ``numeric``, ``boolean``, ``array``, ``date``, ``email``, ``min:n``,
    ``max:n`` and ``in:a,b,c``. Every rule except ``required`` is skipped for
    absent or ``None`` values.
    """

    def validate(
        self,
        data: Mapping,
        rules: Mapping[str, RuleExpression],
        messages: Optional[Mapping[str, str]] = None,
    ) -> ValidationOutcome:
        outcome = ValidationOutcome()
        messages = messages or {}

        for attribute, expression in rules.items():
            value = data.get(attribute)
            for rule, param in _parse_rules(expression):
                if rule == "nullable":
                    continue
                if rule != "required" and value is None:
                    continue
                if not self._passes(rule, param, value, attribute in data):
                    outcome.add(attribute, self._message(attribute, rule, param, messages))
                    if rule == "required":
                        break

        return outcome

    def _passes(self, rule: str, param: Optional[str], value: Any, present: bool) -> bool:
        if rule == "required":
            return present and not _is_empty(value)
        if rule == "string":
            return isinstance(value, str)
        if rule == "integer":
            if isinstance(value, bool):
                return False
            if isinstance(value, int):
                return True
            return isinstance(value, str) and value.strip().lstrip("+-").isdigit()
        if rule == "numeric":
            return _is_number(value)
        if rule == "boolean":
            return any(type(value) is type(v) and value == v for v in _BOOLEAN_VALUES)
        if rule == "array":
            return isinstance(value, (Mapping, list, tuple, Collection))
        if rule == "date":
            try:
                return isinstance(parse_date(value), datetime.date)
            except ValueError:
                return False
        if rule == "email":
            return isinstance(value, str) and bool(_EMAIL.match(value))
        if rule in ("min", "max"):
            if param is None:
                raise ValueError(f"Validation rule '{rule}' requires a parameter")
            size = _size(value)
            if size is None:
                return False
            return size >= float(param) if rule == "min" else size <= float(param)
        if rule == "in":
            options = [o.strip() for o in (param or "").split(",")]
            return str(value) in options
        raise ValueError(f"Unknown validation rule '{rule}'")

    def _message(
        self, attribute: str, rule: str, param: Optional[str], messages: Mapping[str, str]
    ) -> str:
        template = messages.get(f"{attribute}.{rule}") or messages.get(rule) or DEFAULT_MESSAGES[rule]
        return template.format(attribute=attribute, param=param)


class ValidatesProperties:
    """Mixin that turns on construction-time validation for a DTO."""

    __slots__ = ()

    validator_class: Type[Validator] = RuleValidator

    def get_rules(self) -> Dict[str, RuleExpression]:
        return dict(type(self).get_config().rules)

    def get_messages(self) -> Dict[str, str]:
        return dict(type(self).get_config().messages)

    def get_validator(self) -> Validator:
        return self.validator_class()

    def after_validation(self, outcome: ValidationOutcome) -> None:
        """Hook to add further errors once the rules have been checked."""

    def validate(self, data: Mapping) -> ValidationOutcome:
        outcome = self.get_validator().validate(data, self.get_rules(), self.get_messages())

        for field, funcs in type(self)._validators.items():
            if field not in data:
                continue
            for func in funcs:
                try:
                    func(self, data[field])
                except ValueError as exc:
                    outcome.add(field, str(exc))

        self.after_validation(outcome)
        return outcome
