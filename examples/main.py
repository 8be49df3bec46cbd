#!/usr/bin/env python3
"""
Walkthrough of flexible_dto - whitelisting, casting and validation
"""

import logging

from flexible_dto import (
    CastsProperties,
    DataTransferObject,
    PropertyNotAllowed,
    ValidatesProperties,
    ValidationFailed,
    validator,
)


class Uppercase(CastsProperties):
    def cast(self, value):
        return str(value).upper()


class MovieDTO(DataTransferObject, ValidatesProperties):
    allowed_properties = ["title", "released_on", "oscars", "actors", "in_stock"]
    casts = {
        "title": Uppercase,
        "released_on": "date",
        "oscars": "integer",
        "actors": "collection",
        "in_stock": "boolean",
    }
    case_sensitive = False
    ignore_non_permitted_properties = True
    rules = {"title": "required", "oscars": "integer|min:0"}

    @validator("oscars")
    def plausible_oscars(self, value):
        if value > 20:
            raise ValueError("Nobody won that many Oscars.")


def demo_mapping_input():
    """Keys in any naming style map onto the whitelist"""
    print("=== Mapping input ===")

    movie = MovieDTO(
        {
            "Title": "The Godfather",
            "releasedOn": "1972-03-24",
            "OSCARS": "3",
            "actors": ["Marlon Brando", "Al Pacino"],
            "inStock": "yes",
            "box_office": "ignored",
        }
    )

    print(f"movie.title        = {movie.title!r}")
    print(f"movie.releasedOn   = {movie.releasedOn!r}")
    print(f"movie.getOscars()  = {movie.getOscars()!r}")
    print(f"movie.actors.all() = {movie.actors.all()!r}")
    print(f"movie.in_stock     = {movie.in_stock!r}")
    print(f"raw values         = {movie.get_original()!r}")
    print()


def demo_positional_input():
    """Positional values follow the whitelist order"""
    print("=== Positional input ===")

    movie = MovieDTO("Heat", "1995-12-15")
    print(f"get_all()                  = {movie.get_all()!r}")
    print(f"get_all(exclude_empty=True) = {movie.get_all(exclude_empty=True)!r}")
    print()


def demo_errors():
    """Unknown names and invalid data are rejected"""
    print("=== Errors ===")

    movie = MovieDTO({"title": "Heat"})
    try:
        movie.director
    except PropertyNotAllowed as e:
        print(f"PropertyNotAllowed: {e}")

    try:
        MovieDTO({"title": "", "oscars": "99"})
    except ValidationFailed as e:
        print(f"ValidationFailed: {e.errors}")
    print()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    demo_mapping_input()
    demo_positional_input()
    demo_errors()
