# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Symbolic Clifford algebra kernel.

Basis blades are bitmasks over the generators plus an integer scalar. The
algebra is fully described by the squares of its generators, so degenerate
(``e_i^2 = 0``) and negative dimensions are handled by the same product rule.
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import torch

from core.validation import (
    ConfigurationError,
    GENERATOR_DIGITS,
    MAX_GENERATORS,
    check_generator_digit,
    check_generator_squares,
)

# Width of a blade index; an empty difference set sorts after every bit.
INDEX_BITS = MAX_GENERATORS


def _popcount(value: int) -> int:
    return bin(value).count("1")


def _trailing_zeros(value: int) -> int:
    if value == 0:
        return INDEX_BITS
    return (value & -value).bit_length() - 1


@dataclass(frozen=True)
class BasisElement:
    """A signed basis blade.

    Attributes:
        scalar (int): Coefficient, normally +1/-1. Products may carry any
            integer, including 0 for degenerate generators.
        index (int): Bitmask of the generators present in the blade.
    """

    scalar: int
    index: int

    @classmethod
    def from_index(cls, index: int) -> "BasisElement":
        """Blade with scalar 1."""
        return cls(1, index)

    def grade(self) -> int:
        """Number of generators in the blade."""
        return _popcount(self.index)

    def component_bits(self) -> Iterator[int]:
        """Generator indices present in the blade, low to high."""
        return (bit for bit in range(INDEX_BITS) if (self.index >> bit) & 1)

    def with_scalar(self, scalar: int) -> "BasisElement":
        return BasisElement(scalar, self.index)

    def __lt__(self, other: "BasisElement") -> bool:
        # Canonical order: grade first, then whichever side owns the lowest
        # generator the other one lacks.
        if self.grade() != other.grade():
            return self.grade() < other.grade()
        a_without_b = self.index & ~other.index
        b_without_a = other.index & ~self.index
        return _trailing_zeros(a_without_b) < _trailing_zeros(b_without_a)

    def name(self) -> str:
        """Unsigned blade name: ``1`` or ``e`` + generator digits 1-9, A-G."""
        if self.index == 0:
            return "1"
        return "e" + "".join(GENERATOR_DIGITS[bit] for bit in self.component_bits())

    def __str__(self) -> str:
        if self.scalar == 0:
            return "0"
        return ("-" if self.scalar < 0 else "") + self.name()


class GeometricAlgebra:
    """Clifford algebra defined by the squares of its generators.

    Attributes:
        generator_squares (tuple[int, ...]): ``e_i * e_i`` for each generator.
        n (int): Number of generators.
    """
    _CACHED_TABLES = {}

    def __init__(self, generator_squares: Sequence[int]):
        """Validate the metric and set up the algebra.

        Args:
            generator_squares (Sequence[int]): One integer per generator.

        Raises:
            ConfigurationError: On an empty, oversized or non-integer metric.
        """
        check_generator_squares(generator_squares)
        self.generator_squares = tuple(generator_squares)
        self.n = len(self.generator_squares)

    def __repr__(self):
        return f"GeometricAlgebra({list(self.generator_squares)})"

    def basis_size(self) -> int:
        """Number of basis blades (2^n)."""
        return 1 << self.n

    # ------------------------------------------------------------------
    # Blade arithmetic
    # ------------------------------------------------------------------

    def product(self, a: BasisElement, b: BasisElement) -> BasisElement:
        """Geometric product of two blades.

        The commutation sign counts, for every generator of ``a`` (low to
        high), the bits still left in ``a`` above it and the bits of ``b``
        below it; the running ``b`` absorbs each generator as it moves across.
        Generators shared by both blades collapse to their squares.
        """
        commutations = 0
        a_index, b_index = a.index, b.index
        for bit in a.component_bits():
            hurdles_a = a_index & ~((1 << (bit + 1)) - 1)
            hurdles_b = b_index & ((1 << bit) - 1)
            commutations += _popcount(hurdles_a | hurdles_b)
            a_index &= ~(1 << bit)
            b_index ^= 1 << bit

        scalar = a.scalar * b.scalar * (1 if commutations % 2 == 0 else -1)
        for bit in BasisElement.from_index(a.index & b.index).component_bits():
            scalar *= self.generator_squares[bit]
        return BasisElement(scalar, a.index ^ b.index)

    def dual(self, element: BasisElement) -> BasisElement:
        """Complement blade, oriented by ``element * complement``."""
        result = BasisElement(element.scalar, self.basis_size() - 1 - element.index)
        return result.with_scalar(result.scalar * self.product(element, result).scalar)

    def basis(self) -> Iterator[BasisElement]:
        """All 2^n blades in index order with their canonical signs.

        A blade whose dual sorts strictly before it takes over the dual's
        sign; every derived sign downstream depends on this choice.
        """
        for index in range(self.basis_size()):
            element = BasisElement.from_index(index)
            dual = self.dual(element)
            if dual < element:
                element = element.with_scalar(dual.scalar)
            yield element

    def sorted_basis(self) -> List[BasisElement]:
        """Canonical basis in canonical order (Cayley table layout)."""
        return sorted(self.basis())

    def parse_blade(self, name: str) -> BasisElement:
        """Parse a blade token such as ``"1"``, ``"e12"`` or ``"-e13"``.

        Generator digits are multiplied in from left to right, so their order
        changes the sign, not only the index.

        Raises:
            ConfigurationError: On unrecognized syntax or a generator digit
                outside the algebra.
        """
        token = name.strip()
        result = BasisElement.from_index(0)
        if token.startswith("-"):
            token = token[1:]
            result = result.with_scalar(-1)
        if token == "1":
            return result
        if not token.startswith("e") or len(token) < 2:
            raise ConfigurationError(f"unrecognized blade {name!r}")
        for digit in token[1:]:
            generator = check_generator_digit(digit, self.n, name)
            result = self.product(result, BasisElement.from_index(1 << generator))
        return result

    # ------------------------------------------------------------------
    # Cayley table
    # ------------------------------------------------------------------

    def cayley_table(self) -> str:
        """Human-readable Cayley table over :meth:`sorted_basis`.

        Cell ``(row, col)`` holds ``product(row, col)``, right-aligned.
        """
        basis = self.sorted_basis()
        width = self.n + 2
        lines = []
        for row in basis:
            lines.append(" ".join(
                f"{str(self.product(row, col)):>{width}}" for col in basis
            ))
        return "\n".join(lines)

    def cayley_matrix(self) -> List[List[BasisElement]]:
        """Cayley table cells as blades, in canonical order."""
        basis = self.sorted_basis()
        return [[self.product(row, col) for col in basis] for row in basis]

    def cayley_tensors(self, device: str = "cpu") -> Tuple[torch.Tensor, torch.Tensor]:
        """Cayley table over raw (unsigned) blade indices as tensors.

        Returns:
            tuple: ``indices[i, k] = i ^ k`` and
            ``signs[i, k] = (E_i * E_k).scalar`` (float64).
        """
        cache_key = (self.generator_squares, str(device))
        if cache_key not in GeometricAlgebra._CACHED_TABLES:
            GeometricAlgebra._CACHED_TABLES[cache_key] = self._generate_cayley_tensors(device)
        return GeometricAlgebra._CACHED_TABLES[cache_key]

    def _generate_cayley_tensors(self, device):
        dim = self.basis_size()
        indices = torch.arange(dim, device=device)
        cayley_indices = indices.unsqueeze(1) ^ indices.unsqueeze(0)
        signs = torch.tensor(
            [[self.product(BasisElement.from_index(i), BasisElement.from_index(k)).scalar
              for k in range(dim)] for i in range(dim)],
            dtype=torch.float64, device=device,
        )
        return cayley_indices, signs

    def geometric_product(self, A: torch.Tensor, B: torch.Tensor) -> torch.Tensor:
        """Dense geometric product of raw-index coefficient tensors.

        Args:
            A (torch.Tensor): Left operand [..., 2^n].
            B (torch.Tensor): Right operand [..., 2^n].

        Returns:
            torch.Tensor: ``A * B`` [..., 2^n].
        """
        dim = self.basis_size()
        assert A.shape[-1] == dim and B.shape[-1] == dim, (
            f"operands must have last dim {dim}, got {tuple(A.shape)} and {tuple(B.shape)}"
        )
        idx, signs = self.cayley_tensors(str(A.device))
        # result[k] = sum_i A[i] * B[i ^ k] * sign(E_i, E_(i ^ k))
        gp_signs = torch.gather(signs, 1, idx).to(A.dtype)
        B_gathered = B[..., idx]
        return (A.unsqueeze(-1) * B_gathered * gp_signs).sum(dim=-2)
