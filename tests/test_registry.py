# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Tests for multivector classes, the registry and descriptor parsing.

import pytest

from core.algebra import BasisElement, GeometricAlgebra
from core.descriptor import (
    canonical_class,
    complete_registry,
    load_configuration,
    parse_descriptor,
    product_signature,
)
from core.registry import MultiVectorClass, MultiVectorClassRegistry
from core.validation import ConfigurationError


@pytest.fixture(scope="module")
def g3():
    return GeometricAlgebra([1, 1, 1])


def make_class(algebra, name, *groups):
    return MultiVectorClass(name, [[algebra.parse_blade(b) for b in group] for group in groups])


# ---------------------------------------------------------------------------
# MultiVectorClass
# ---------------------------------------------------------------------------

def test_signature_is_sorted(g3):
    motor = make_class(g3, "Odd", ["e3"], ["e1", "e2", "e123"])
    assert motor.signature() == (1, 2, 4, 7)
    assert [e.index for e in motor.flat_basis()] == [4, 1, 2, 7]


def test_index_in_group(g3):
    multi_vector_class = make_class(g3, "M", ["1", "e12", "e13", "e23"], ["e1", "e2", "e3"])
    assert multi_vector_class.index_in_group(0) == (0, 0)
    assert multi_vector_class.index_in_group(3) == (0, 3)
    assert multi_vector_class.index_in_group(5) == (1, 1)
    with pytest.raises(IndexError):
        multi_vector_class.index_in_group(7)


def test_is_scalar(g3):
    assert make_class(g3, "Scalar", ["1"]).is_scalar()
    assert make_class(g3, "NegScalar", ["-1"]).is_scalar()
    assert not make_class(g3, "Rotor", ["1", "e12"]).is_scalar()


def test_class_is_hashable_and_structural(g3):
    a = make_class(g3, "Vector", ["e1", "e2", "e3"])
    b = make_class(g3, "Vector", ["e1", "e2", "e3"])
    assert a == b and hash(a) == hash(b)
    assert str(a) == "Vector:e1,e2,e3"


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

def test_register_and_get(g3):
    vector = make_class(g3, "Vector", ["e1", "e2", "e3"])
    registry = MultiVectorClassRegistry([vector])
    assert registry.get([1, 2, 4]) is vector
    assert registry.get((1, 2)) is None
    assert registry.scalar_class() is None
    assert len(registry) == 1


def test_duplicate_signature_last_wins(g3):
    first = make_class(g3, "Vector", ["e1", "e2", "e3"])
    second = make_class(g3, "Direction", ["e3", "e2", "e1"])
    registry = MultiVectorClassRegistry([first, second])
    assert registry.get((1, 2, 4)) is second
    assert list(registry) == [first, second]
    assert registry.index_of(first) == 0
    assert registry.index_of(second) == 1


def test_index_of_is_identity(g3):
    vector = make_class(g3, "Vector", ["e1", "e2", "e3"])
    twin = make_class(g3, "Vector", ["e1", "e2", "e3"])
    registry = MultiVectorClassRegistry([vector])
    with pytest.raises(KeyError):
        registry.index_of(twin)


# ---------------------------------------------------------------------------
# Descriptor parsing
# ---------------------------------------------------------------------------

def test_parse_descriptor():
    configuration = parse_descriptor("PGA3:0,1,1,1;Motor:1,e34,e42,e23|e1,e12,e13,e14;Point:e234,e143,e124,e132")
    assert configuration.algebra_name == "PGA3"
    assert configuration.algebra.generator_squares == (0, 1, 1, 1)
    motor, point = configuration.registry.classes
    assert motor.class_name == "Motor"
    assert [len(group) for group in motor.grouped_basis] == [4, 4]
    assert str(motor.grouped_basis[0][2]) == "-e24"
    assert point.signature() == (7, 11, 13, 14)


def test_parse_trailing_separator():
    configuration = parse_descriptor("G2:1,1;Vector:e1,e2;")
    assert len(configuration.registry) == 1


@pytest.mark.parametrize("descriptor", [
    "",
    "G3",
    "G3:",
    "G3:1,a,1",
    "G3:1.5,1",
    ":1,1",
    "G 3:1,1",
    "G3:1,1,1;:e1",
    "G3:1,1,1;Vector",
    "G3:1,1,1;Vector:e1,,e2",
    "G3:1,1,1;Vector:e4",
    "G3:1,1,1;Vector:e0",
    "G3:1,1,1;Vector:e1|",
    "Big:" + ",".join(["1"] * 17),
])
def test_malformed_descriptors(descriptor):
    with pytest.raises(ConfigurationError):
        parse_descriptor(descriptor)


# ---------------------------------------------------------------------------
# Registry completion
# ---------------------------------------------------------------------------

def test_completion_adds_scalar():
    configuration = parse_descriptor("G3:1,1,1;Rotor:1,e12,e13,e23")
    added = complete_registry(configuration.registry, configuration.algebra)
    assert [c.class_name for c in added] == ["Scalar"]
    assert configuration.registry.scalar_class() is added[0]


def test_completion_closes_under_geometric_product():
    configuration = parse_descriptor("G3:1,1,1;Rotor:1,e12,e13,e23;Vector:e1,e2,e3")
    added = complete_registry(configuration.registry, configuration.algebra)
    assert [c.class_name for c in added] == ["Scalar", "RotorVectorProduct"]
    odd = added[1]
    assert [str(e) for e in odd.flat_basis()] == ["e1", "e2", "e3", "e123"]
    registry = configuration.registry
    for a in registry:
        for b in registry:
            assert registry.get(product_signature(configuration.algebra, a, b)) is not None


def test_completion_is_noop_when_closed():
    configuration = parse_descriptor("G3:1,1,1;Scalar:1;Rotor:1,e12,e13,e23")
    assert complete_registry(configuration.registry, configuration.algebra) == []


def test_canonical_class_grouping():
    algebra = GeometricAlgebra([1, 1, 1, 1])
    even = [e.index for e in algebra.basis() if e.grade() % 2 == 0]
    multi_vector_class = canonical_class(algebra, "Even", even)
    assert [len(group) for group in multi_vector_class.grouped_basis] == [4, 4]
    assert multi_vector_class.flat_basis()[0] == BasisElement(1, 0)
    assert multi_vector_class.signature() == tuple(sorted(even))


def test_load_configuration_switch():
    plain = load_configuration("G3:1,1,1;Rotor:1,e12,e13,e23", complete=False)
    assert len(plain.registry) == 1
    completed = load_configuration("G3:1,1,1;Rotor:1,e12,e13,e23")
    assert len(completed.registry) == 2
