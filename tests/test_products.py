# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Tests for the standard involutions and products.

import pytest

from core.algebra import GeometricAlgebra
from core.products import (
    GradeNegation,
    GradeProjection,
    Involution,
    Product,
    involutions,
    products,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="module")
def g3():
    return GeometricAlgebra([1, 1, 1])


@pytest.fixture(scope="module")
def pga():
    return GeometricAlgebra([0, 1, 1, 1])


# ---------------------------------------------------------------------------
# Involutions
# ---------------------------------------------------------------------------

def test_involution_order(g3):
    assert [name for name, _ in involutions(g3)] == [
        "Neg", "Automorphism", "Reversal", "Conjugation", "Dual",
    ]


@pytest.mark.parametrize("negation, negated_grades", [
    (GradeNegation.ALL, {0, 1, 2, 3, 4}),
    (GradeNegation.ODD, {1, 3}),
    (GradeNegation.REVERSAL, {2, 3}),
    (GradeNegation.CONJUGATION, {1, 2}),
])
def test_grade_negation(negation, negated_grades):
    assert {grade for grade in range(5) if negation.negates(grade)} == negated_grades


def test_involutions_cover_basis(g3):
    for _, involution in involutions(g3):
        assert sorted(key.index for key, _ in involution.terms) == list(range(8))


def test_reversal_twice_is_identity(g3):
    reversal = dict(involutions(g3))["Reversal"]
    assert reversal.negated(GradeNegation.REVERSAL) == Involution.identity(g3)


def test_reversal_signs(g3):
    reversal = dict(involutions(g3))["Reversal"]
    for key, image in reversal.terms:
        assert image.index == key.index
        expected = -1 if key.grade() in (2, 3) else 1
        assert image.scalar == expected * key.scalar


def test_dual_maps_to_complement(g3):
    dual = dict(involutions(g3))["Dual"]
    for key, value in dual.terms:
        assert value.index == 7 - key.index


def test_projection_keeps_only_given_blades(g3):
    vector = [g3.parse_blade(name) for name in ("e1", "e2", "e3")]
    projection = Involution.projection(vector)
    assert [key.index for key, _ in projection.terms] == [1, 2, 4]
    assert all(key == value for key, value in projection.terms)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

def test_product_order(g3):
    assert [name for name, _ in products(g3)] == [
        "GeometricProduct", "RegressiveProduct", "OuterProduct", "InnerProduct",
        "LeftContraction", "RightContraction", "ScalarProduct",
    ]


def test_product_term_counts(g3):
    tables = dict(products(g3))
    assert len(tables["GeometricProduct"]) == 64
    assert len(tables["OuterProduct"]) == 27
    assert len(tables["ScalarProduct"]) == 8
    assert len(tables["RegressiveProduct"]) == len(tables["OuterProduct"])


def test_zero_square_drops_terms(pga):
    geometric = dict(products(pga))["GeometricProduct"]
    # pairs sharing the null generator vanish
    assert len(geometric) == 16 * 16 - 8 * 8
    assert all(term.product.scalar != 0 for term in geometric.terms)


@pytest.mark.parametrize("name, projection", [
    ("OuterProduct", GradeProjection.OUTER),
    ("InnerProduct", GradeProjection.INNER),
    ("LeftContraction", GradeProjection.LEFT_CONTRACTION),
    ("RightContraction", GradeProjection.RIGHT_CONTRACTION),
    ("ScalarProduct", GradeProjection.SCALAR),
])
def test_named_products_are_grade_filtered(g3, name, projection):
    tables = dict(products(g3))
    geometric = set(tables["GeometricProduct"].terms)
    for term in tables[name].terms:
        assert term in geometric
        assert projection.keeps(term.factor_a.grade(), term.factor_b.grade(), term.product.grade())


def test_regressive_is_dual_of_outer(g3):
    tables = dict(products(g3))
    for outer, regressive in zip(tables["OuterProduct"].terms, tables["RegressiveProduct"].terms):
        assert regressive.factor_a.index == 7 - outer.factor_a.index
        assert regressive.factor_b.index == 7 - outer.factor_b.index
        assert regressive.product.index == 7 - outer.product.index


def test_build_restricted(g3):
    vector = [g3.parse_blade(name) for name in ("e1", "e2", "e3")]
    table = Product.build(vector, vector, g3)
    assert len(table) == 9
    assert {term.product.index for term in table.terms} == {0, 3, 5, 6}


def _grade_pairs(algebra):
    grades = range(algebra.n + 1)
    return [(r, s) for r in grades for s in grades]


def _with_factor_grades(terms, r, s):
    return {term for term in terms if (term.factor_a.grade(), term.factor_b.grade()) == (r, s)}


@pytest.mark.parametrize("algebra", ["g3", "pga"])
def test_named_products_cover_extreme_grades(request, algebra):
    algebra = request.getfixturevalue(algebra)
    tables = dict(products(algebra))
    named = set()
    for name in ("OuterProduct", "InnerProduct", "LeftContraction", "RightContraction", "ScalarProduct"):
        named.update(tables[name].terms)
    for r, s in _grade_pairs(algebra):
        extreme = {
            term for term in _with_factor_grades(tables["GeometricProduct"].terms, r, s)
            if term.product.grade() in (abs(r - s), r + s)
        }
        assert _with_factor_grades(named, r, s) == extreme, (r, s)


def test_vector_products_split_geometric(g3):
    tables = dict(products(g3))
    geometric = _with_factor_grades(tables["GeometricProduct"].terms, 1, 1)
    outer = _with_factor_grades(tables["OuterProduct"].terms, 1, 1)
    inner = _with_factor_grades(tables["InnerProduct"].terms, 1, 1)
    assert outer | inner == geometric
    assert not outer & inner
    assert len(inner) == 3
