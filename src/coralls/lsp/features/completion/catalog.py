"""Static completion catalog for Coral keywords and built-in functions."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple


CORAL_SPEC_URL = "https://corallanguage.org/spec/"


@dataclass(frozen=True)
class CompletionDetail:
    detail: str
    documentation: str


def _detail(label: str, description: str) -> CompletionDetail:
    return CompletionDetail(
        detail=f"{label} details",
        documentation=f"{description} For more information see {CORAL_SPEC_URL}",
    )


_PUT_EXPRESSION = "is part of the [Put item to output] expression, which prints to standard output."
_GET_EXPRESSION = "is part of the [Get next input] expression."
_ROUNDING_EXPRESSION = (
    "is part of the [Put floatvar to output with 3 decimal places] expression, used to round values."
)

# Ordered by id; the position in this tuple is the catalog order
CATALOG: Tuple[Tuple[int, str, str], ...] = (
    (1, "integer", "integer is a data type."),
    (2, "float", "float is a data type."),
    (3, "to", f"to {_PUT_EXPRESSION}"),
    (4, "output", f"output {_PUT_EXPRESSION}"),
    (5, "if", "if is a conditional."),
    (6, "elseif", "elseif is part of a conditional expression."),
    (7, "else", "else is part of a conditional expression."),
    (8, "while", "while is a loop that runs as long as its condition holds."),
    (9, "Get", f"Get {_GET_EXPRESSION}"),
    (10, "for", "for is a loop that runs a given number of times."),
    (11, "array", "array is a sequence of values of one data type."),
    (12, "Function", "Function starts a function definition."),
    (13, "returns", "returns is part of a function definition and names its return value."),
    (14, "Main", "Main is the program's entry point and follows all function definitions."),
    (15, "size", "size is an array attribute holding its number of elements."),
    (16, "SquareRoot", "SquareRoot is a built-in math function."),
    (17, "RaiseToPower", "RaiseToPower is a built-in math function."),
    (18, "AbsoluteValue", "AbsoluteValue is a built-in math function."),
    (19, "RandomNumber", "RandomNumber is a built-in randomness function."),
    (20, "SeedRandomNumbers", "SeedRandomNumbers is a built-in randomness function."),
    (21, "with", f"with {_ROUNDING_EXPRESSION}"),
    (22, "decimal", f"decimal {_ROUNDING_EXPRESSION}"),
    (23, "places", f"places {_ROUNDING_EXPRESSION}"),
    (24, "next", f"next {_GET_EXPRESSION}"),
    (25, "input", f"input {_GET_EXPRESSION}"),
    (26, "Put", f"Put {_PUT_EXPRESSION}"),
    (27, "or", "or is a logical operator used in conditions."),
    (28, "and", "and is a logical operator used in conditions."),
    (29, "nothing", "nothing is a keyword used in conditions."),
    (30, "not", "not is a logical operator used in conditions."),
)

COMPLETION_DETAILS: Mapping[int, CompletionDetail] = MappingProxyType(
    {item_id: _detail(label, description) for item_id, label, description in CATALOG}
)
