"""Path parameter converters for route patterns like ``{id:int}``."""

from typing import NamedTuple


class Converter(NamedTuple):
    """How a parameter segment is matched and converted."""

    pattern: str
    convert: type


CONVERTERS: dict[str, Converter] = {
    "str": Converter(r"[^/]+", str),
    "int": Converter(r"\d+", int),
    "float": Converter(r"\d+(?:\.\d+)?", float),
    "path": Converter(r".+", str),
}


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured fragment segment to the converter's type.

    Raises ``ValueError`` if the string cannot be converted and
    ``KeyError`` if *param_type* is not a registered converter.
    """
    return CONVERTERS[param_type].convert(value)
