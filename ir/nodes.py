# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Backend-neutral intermediate representation.

Every node is a frozen dataclass, so trees compare structurally: building the
same operation twice gives equal trees, and ``node == EMPTY`` is how the
derivation engine reports that an operation does not apply.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from core.registry import MultiVectorClass


class Operation(Enum):
    """Every operation the derivation engine can define."""

    ZERO = "Zero"
    ONE = "One"
    NEG = "Neg"
    AUTOMORPHISM = "Automorphism"
    REVERSAL = "Reversal"
    CONJUGATION = "Conjugation"
    DUAL = "Dual"
    INTO = "Into"
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    DIV = "Div"
    GEOMETRIC_PRODUCT = "GeometricProduct"
    REGRESSIVE_PRODUCT = "RegressiveProduct"
    OUTER_PRODUCT = "OuterProduct"
    INNER_PRODUCT = "InnerProduct"
    LEFT_CONTRACTION = "LeftContraction"
    RIGHT_CONTRACTION = "RightContraction"
    SCALAR_PRODUCT = "ScalarProduct"
    SQUARED_MAGNITUDE = "SquaredMagnitude"
    MAGNITUDE = "Magnitude"
    SCALE = "Scale"
    SIGNUM = "Signum"
    INVERSE = "Inverse"
    POWI = "Powi"
    GEOMETRIC_QUOTIENT = "GeometricQuotient"
    TRANSFORMATION = "Transformation"


class Builtin(Enum):
    """Methods every target provides without a generated definition."""

    CONSTRUCTOR = "Constructor"
    ABS = "Abs"


Method = Union[Operation, Builtin]


# ----------------------------------------------------------------------
# Data types
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Integer:
    def is_scalar(self) -> bool:
        return False


@dataclass(frozen=True)
class SimdVector:
    size: int

    def is_scalar(self) -> bool:
        return self.size == 1


@dataclass(frozen=True)
class MultiVector:
    multi_vector_class: MultiVectorClass

    def is_scalar(self) -> bool:
        return self.multi_vector_class.is_scalar()


DataType = Union[Integer, SimdVector, MultiVector]


# ----------------------------------------------------------------------
# Expressions
# ----------------------------------------------------------------------

class BinaryOperator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    LESS_THAN = "<"
    EQUAL = "=="
    LOGIC_AND = "&"
    SHIFT_RIGHT = ">>"


@dataclass(frozen=True)
class Expression:
    """An expression producing ``size`` lanes (1 = scalar-like)."""

    size: int
    content: "ExpressionContent"

    def is_scalar(self) -> bool:
        if self.size > 1:
            return False
        if isinstance(self.content, Variable):
            return self.content.data_type.is_scalar()
        if isinstance(self.content, InvokeInstanceMethod):
            return self.content.result_type.is_scalar()
        return False


Arguments = Tuple[Tuple[DataType, Expression], ...]


@dataclass(frozen=True)
class Variable:
    data_type: DataType
    name: str


@dataclass(frozen=True)
class InvokeClassMethod:
    multi_vector_class: MultiVectorClass
    method: Method
    arguments: Arguments = ()


@dataclass(frozen=True)
class InvokeInstanceMethod:
    instance_type: DataType
    instance: Expression
    method: Method
    result_type: DataType
    arguments: Arguments = ()


@dataclass(frozen=True)
class Conversion:
    source: MultiVectorClass
    destination: MultiVectorClass
    inner: Expression


@dataclass(frozen=True)
class Select:
    condition: Expression
    then_expression: Expression
    else_expression: Expression


@dataclass(frozen=True)
class Access:
    """One whole group of a multivector (or the value itself if scalar)."""

    inner: Expression
    group: int


@dataclass(frozen=True)
class Swizzle:
    inner: Expression
    lanes: Tuple[int, ...]


@dataclass(frozen=True)
class Gather:
    """Assemble lanes from ``(group, lane)`` positions of a multivector."""

    inner: Expression
    indices: Tuple[Tuple[int, int], ...]


@dataclass(frozen=True)
class Constant:
    data_type: DataType
    values: Tuple[int, ...]


@dataclass(frozen=True)
class SquareRoot:
    inner: Expression


@dataclass(frozen=True)
class BinaryOperation:
    operator: BinaryOperator
    lhs: Expression
    rhs: Expression


ExpressionContent = Union[
    Variable, InvokeClassMethod, InvokeInstanceMethod, Conversion, Select,
    Access, Swizzle, Gather, Constant, SquareRoot, BinaryOperation,
]


# ----------------------------------------------------------------------
# Statements
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class Parameter:
    name: Union[str, Operation]
    data_type: DataType

    def multi_vector_class(self) -> MultiVectorClass:
        assert isinstance(self.data_type, MultiVector), (
            f"parameter {self.name} is not a multivector ({self.data_type})"
        )
        return self.data_type.multi_vector_class


@dataclass(frozen=True)
class Empty:
    """Sentinel for an operation that does not apply."""


@dataclass(frozen=True)
class Preamble:
    pass


@dataclass(frozen=True)
class ClassDefinition:
    multi_vector_class: MultiVectorClass


@dataclass(frozen=True)
class ReturnStatement:
    expression: Expression


@dataclass(frozen=True)
class VariableAssignment:
    name: str
    data_type: Optional[DataType]
    expression: Expression


@dataclass(frozen=True)
class IfThenBlock:
    condition: Expression
    body: Tuple["Statement", ...]


@dataclass(frozen=True)
class WhileLoopBlock:
    condition: Expression
    body: Tuple["Statement", ...]


@dataclass(frozen=True)
class OperationDefinition:
    """A synthesized operation: ``result.name`` is the :class:`Operation`."""

    result: Parameter
    parameters: Tuple[Parameter, ...]
    body: Tuple["Statement", ...]

    @property
    def operation(self) -> Operation:
        return self.result.name


Statement = Union[
    Empty, Preamble, ClassDefinition, ReturnStatement, VariableAssignment,
    IfThenBlock, WhileLoopBlock, OperationDefinition,
]

EMPTY = Empty()
PREAMBLE = Preamble()


# ----------------------------------------------------------------------
# Construction helpers
# ----------------------------------------------------------------------

def variable(parameter: Parameter, size: int = 1) -> Expression:
    return Expression(size, Variable(parameter.data_type, parameter.name))


def constant(data_type: DataType, values, size: Optional[int] = None) -> Expression:
    values = tuple(values)
    return Expression(len(values) if size is None else size, Constant(data_type, values))


def binary(operator: BinaryOperator, lhs: Expression, rhs: Expression) -> Expression:
    return Expression(max(lhs.size, rhs.size), BinaryOperation(operator, lhs, rhs))


def invoke(instance: Expression, instance_type: DataType, definition: OperationDefinition,
           arguments: Arguments = ()) -> Expression:
    """Call an already-derived operation on *instance*."""
    return Expression(1, InvokeInstanceMethod(
        instance_type, instance, definition.operation, definition.result.data_type, tuple(arguments),
    ))


def construct(multi_vector_class: MultiVectorClass, groups) -> Expression:
    """Build a multivector from one lane-vector expression per group."""
    return Expression(1, InvokeClassMethod(
        multi_vector_class, Builtin.CONSTRUCTOR,
        tuple((SimdVector(group.size), group) for group in groups),
    ))
