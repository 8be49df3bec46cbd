from typing import Any, Dict, List, Optional


class DTOError(Exception):
    """Base class for every error raised by flexible_dto."""


class InvalidArgument(DTOError, ValueError):
    """A property name or value was rejected."""


class PropertyNotAllowed(InvalidArgument, AttributeError):
    """A property name is outside the DTO whitelist."""

    def __init__(self, name: Any, reading: bool = False) -> None:
        self.name = name
        reason = "a valid" if reading else "an allowed"
        super().__init__(f"{name} is not {reason} property.")


class CastError(InvalidArgument):
    """A raw property value could not be cast to its declared kind."""

    def __init__(
        self,
        property_name: str,
        kind: str,
        value: Any = None,
        message: Optional[str] = None,
        include_value: bool = True,
    ) -> None:
        self.property_name = property_name
        self.kind = kind
        self.value = value
        if message is None:
            if value is None or not include_value:
                message = f"The provided {property_name} value could not be cast to {kind}."
            else:
                message = (
                    f"The provided {property_name} value of `{value}` "
                    f"could not be cast to {kind}."
                )
        super().__init__(message)


class InvalidDateFormat(CastError):
    """A raw property value is not a parseable date."""

    def __init__(self, property_name: str, value: Any) -> None:
        super().__init__(
            property_name,
            "date",
            value,
            message=(
                f"The provided {property_name} value of `{value}` "
                f"is not a valid date format."
            ),
        )


class ValidationFailed(DTOError):
    """Construction-time validation reported one or more errors."""

    def __init__(self, outcome: Any) -> None:
        self.outcome = outcome
        super().__init__(outcome.first() or "The given data was invalid.")

    @property
    def errors(self) -> Dict[str, List[str]]:
        return self.outcome.errors
