# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""Intermediate representation shared by the derivation engine and renderers.

Node types, the local simplifier, and a torch reference interpreter.
"""

from .nodes import (
    EMPTY,
    PREAMBLE,
    ClassDefinition,
    Expression,
    Integer,
    MultiVector,
    Operation,
    OperationDefinition,
    Parameter,
    SimdVector,
)
from .simplify import simplify
from .evaluator import Evaluator, from_dense, to_dense, random_value
