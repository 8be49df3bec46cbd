"""
FlexibleDTO - whitelisted, read-only data transfer objects for Python

Maps loosely-typed input (mappings, key/value pairs, keyword or positional
arguments) onto a declared list of properties, casts each value when it is
read, and optionally validates the populated data on construction.

Example:
    from flexible_dto import DataTransferObject, ValidatesProperties, validator

    class MovieDTO(DataTransferObject, ValidatesProperties):
        allowed_properties = ["title", "released_on", "oscars"]
        casts = {"released_on": "date", "oscars": "integer"}
        case_sensitive = False
        rules = {"title": "required"}

    movie = MovieDTO({"Title": "The Godfather", "releasedOn": "1972-03-24", "oscars": "3"})
    movie.get_title()   # 'The Godfather'
    movie.oscars        # 3
"""

__version__ = "1.0.0"
__author__ = "Your Name"
__email__ = "your.email@example.com"
__license__ = "MIT"

from .casts import CastKind, CastsProperties, Collection, cast_value, parse_cast
from .core import BaseDTO, DataTransferObject, DTOConfig, DTOMeta
from .errors import (
    CastError,
    DTOError,
    InvalidArgument,
    InvalidDateFormat,
    PropertyNotAllowed,
    ValidationFailed,
)
from .naming import camel, resolve_property, snake
from .validation import (
    RuleValidator,
    ValidatesProperties,
    ValidationOutcome,
    Validator,
    validator,
)

__all__ = [
    "BaseDTO",
    "DataTransferObject",
    "DTOConfig",
    "DTOMeta",
    "CastKind",
    "CastsProperties",
    "Collection",
    "cast_value",
    "parse_cast",
    "CastError",
    "DTOError",
    "InvalidArgument",
    "InvalidDateFormat",
    "PropertyNotAllowed",
    "ValidationFailed",
    "camel",
    "snake",
    "resolve_property",
    "RuleValidator",
    "ValidatesProperties",
    "ValidationOutcome",
    "Validator",
    "validator",
]
