# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""Configuration validation for Bladegen.

Configuration defects are fatal: every check raises
:class:`ConfigurationError` and nothing downstream tries to recover.
Internal invariants of the kernel stay plain ``assert`` statements.
"""

MAX_GENERATORS = 16

# Blade digit d names generator d, stored at bit d - 1.
GENERATOR_DIGITS = "123456789ABCDEFG"


class ConfigurationError(ValueError):
    """Malformed algebra/class descriptor or blade name."""


def check_generator_squares(squares, name: str = "generator_squares") -> None:
    """Raise unless *squares* is a non-empty sequence of at most 16 integers."""
    if len(squares) == 0:
        raise ConfigurationError(f"{name}: an algebra needs at least one generator")
    if len(squares) > MAX_GENERATORS:
        raise ConfigurationError(
            f"{name}: at most {MAX_GENERATORS} generators are supported, "
            f"got {len(squares)}"
        )
    for square in squares:
        if isinstance(square, bool) or not isinstance(square, int):
            raise ConfigurationError(
                f"{name}: generator squares must be integers, got {square!r}"
            )


def check_generator_digit(digit: str, generator_count: int, blade: str) -> int:
    """Decode one generator digit of *blade* into its bit position.

    Generators are numbered from 1: digit ``1`` is bit 0 and ``G`` is bit 15.
    """
    number = GENERATOR_DIGITS.find(digit.upper()) + 1
    if number == 0:
        raise ConfigurationError(
            f"blade {blade!r}: {digit!r} is not a generator digit (1-9, A-G)"
        )
    if number > generator_count:
        raise ConfigurationError(
            f"blade {blade!r}: generator {digit} is out of range for an algebra "
            f"with {generator_count} generators"
        )
    return number - 1


def check_name(name: str, what: str) -> str:
    """Raise unless *name* is a usable identifier for generated code."""
    name = name.strip()
    if not name or not name.isidentifier():
        raise ConfigurationError(f"{what}: {name!r} is not a valid identifier")
    return name
