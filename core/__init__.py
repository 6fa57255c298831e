# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""Core mathematical kernel for Geometric Algebra.

Provides basis blades and the algebra itself, the standard involutions and
products, the multivector class registry and descriptor parsing.
"""

from .algebra import BasisElement, GeometricAlgebra
from .products import (
    GradeNegation,
    GradeProjection,
    Involution,
    Product,
    ProductTerm,
    involutions,
    products,
)
from .registry import MultiVectorClass, MultiVectorClassRegistry
from .validation import ConfigurationError, MAX_GENERATORS
from .descriptor import (
    Configuration,
    parse_descriptor,
    complete_registry,
    load_configuration,
)
