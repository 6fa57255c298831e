# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Involutions and bilinear products derived from the Cayley table.

Both are computed once per algebra and then restricted to the blades of a
particular multivector class by the derivation engine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple

from core.algebra import BasisElement, GeometricAlgebra


class GradeNegation(Enum):
    """Grade predicates selecting which blades an involution negates."""

    ALL = "all"
    ODD = "odd"
    REVERSAL = "reversal"
    CONJUGATION = "conjugation"

    def negates(self, grade: int) -> bool:
        if self is GradeNegation.ALL:
            return True
        if self is GradeNegation.ODD:
            return grade % 2 == 1
        if self is GradeNegation.REVERSAL:
            return grade % 4 >= 2
        return (grade + 3) % 4 < 2


class GradeProjection(Enum):
    """Grade predicates ``(r, s, t)`` that carve products out of the full table.

    ``r`` and ``s`` are the factor grades, ``t`` the product grade.
    """

    OUTER = "outer"
    INNER = "inner"
    LEFT_CONTRACTION = "left_contraction"
    RIGHT_CONTRACTION = "right_contraction"
    SCALAR = "scalar"

    def keeps(self, r: int, s: int, t: int) -> bool:
        if self is GradeProjection.OUTER:
            return t == r + s
        if self is GradeProjection.INNER:
            return t == abs(r - s)
        if self is GradeProjection.LEFT_CONTRACTION:
            return t == s - r
        if self is GradeProjection.RIGHT_CONTRACTION:
            return t == r - s
        return t == 0


@dataclass(frozen=True)
class Involution:
    """Basis map given as explicit ``(source, mapped value)`` pairs."""

    terms: Tuple[Tuple[BasisElement, BasisElement], ...]

    @classmethod
    def identity(cls, algebra: GeometricAlgebra) -> "Involution":
        return cls(tuple((element, element) for element in algebra.basis()))

    @classmethod
    def projection(cls, blades: Iterable[BasisElement]) -> "Involution":
        """Identity restricted to *blades* (used for class conversions)."""
        return cls(tuple((element, element) for element in blades))

    def negated(self, negation: GradeNegation) -> "Involution":
        return Involution(tuple(
            (key, value.with_scalar(-value.scalar if negation.negates(value.grade()) else value.scalar))
            for key, value in self.terms
        ))

    def dual(self, algebra: GeometricAlgebra) -> "Involution":
        return Involution(tuple((key, algebra.dual(value)) for key, value in self.terms))


def involutions(algebra: GeometricAlgebra) -> List[Tuple[str, Involution]]:
    """The five standard involutions, in derivation order."""
    identity = Involution.identity(algebra)
    return [
        ("Neg", identity.negated(GradeNegation.ALL)),
        ("Automorphism", identity.negated(GradeNegation.ODD)),
        ("Reversal", identity.negated(GradeNegation.REVERSAL)),
        ("Conjugation", identity.negated(GradeNegation.CONJUGATION)),
        ("Dual", identity.dual(algebra)),
    ]


@dataclass(frozen=True)
class ProductTerm:
    """``factor_a * factor_b = product`` with a nonzero product scalar."""

    factor_a: BasisElement
    factor_b: BasisElement
    product: BasisElement


@dataclass(frozen=True)
class Product:
    """Sparse structure constants of a bilinear product."""

    terms: Tuple[ProductTerm, ...]

    @classmethod
    def build(cls, a: Iterable[BasisElement], b: Iterable[BasisElement],
              algebra: GeometricAlgebra) -> "Product":
        """Full geometric product between every blade of *a* and of *b*."""
        b = list(b)
        terms = []
        for factor_a in a:
            for factor_b in b:
                product = algebra.product(factor_a, factor_b)
                if product.scalar != 0:
                    terms.append(ProductTerm(factor_a, factor_b, product))
        return cls(tuple(terms))

    def projected(self, projection: GradeProjection) -> "Product":
        return Product(tuple(
            term for term in self.terms
            if projection.keeps(term.factor_a.grade(), term.factor_b.grade(), term.product.grade())
        ))

    def dual(self, algebra: GeometricAlgebra) -> "Product":
        return Product(tuple(
            ProductTerm(algebra.dual(term.factor_a), algebra.dual(term.factor_b),
                        algebra.dual(term.product))
            for term in self.terms
        ))

    def __len__(self):
        return len(self.terms)


def products(algebra: GeometricAlgebra) -> List[Tuple[str, Product]]:
    """The seven standard products, all carved out of one geometric table."""
    basis = list(algebra.basis())
    geometric = Product.build(basis, basis, algebra)
    outer = geometric.projected(GradeProjection.OUTER)
    return [
        ("GeometricProduct", geometric),
        ("RegressiveProduct", outer.dual(algebra)),
        ("OuterProduct", outer),
        ("InnerProduct", geometric.projected(GradeProjection.INNER)),
        ("LeftContraction", geometric.projected(GradeProjection.LEFT_CONTRACTION)),
        ("RightContraction", geometric.projected(GradeProjection.RIGHT_CONTRACTION)),
        ("ScalarProduct", geometric.projected(GradeProjection.SCALAR)),
    ]
