# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Reference interpreter for operation definitions.

Runs synthesized IR on torch tensors so that every derived operation can be
checked against :meth:`core.algebra.GeometricAlgebra.geometric_product`.

Value layout:
    * multivector -> tuple with one ``[..., group_size]`` tensor per group;
    * SIMD vector -> ``[..., size]`` tensor;
    * integer -> Python ``int``.

Leading batch dimensions broadcast through every operation.
"""

from typing import Dict, Iterable, Sequence, Tuple

import torch

from core.registry import MultiVectorClass
from ir.nodes import (
    Access,
    BinaryOperation,
    BinaryOperator,
    Builtin,
    Constant,
    Conversion,
    Expression,
    Gather,
    IfThenBlock,
    Integer,
    InvokeClassMethod,
    InvokeInstanceMethod,
    MultiVector,
    Operation,
    OperationDefinition,
    ReturnStatement,
    Select,
    SquareRoot,
    Swizzle,
    Variable,
    VariableAssignment,
    WhileLoopBlock,
)

_TENSOR_OPERATORS = {
    BinaryOperator.ADD: torch.add,
    BinaryOperator.SUBTRACT: torch.sub,
    BinaryOperator.MULTIPLY: torch.mul,
    BinaryOperator.DIVIDE: torch.div,
}

_INTEGER_OPERATORS = {
    BinaryOperator.ADD: lambda x, y: x + y,
    BinaryOperator.SUBTRACT: lambda x, y: x - y,
    BinaryOperator.MULTIPLY: lambda x, y: x * y,
    BinaryOperator.DIVIDE: lambda x, y: x // y,
    BinaryOperator.LESS_THAN: lambda x, y: x < y,
    BinaryOperator.EQUAL: lambda x, y: x == y,
    BinaryOperator.LOGIC_AND: lambda x, y: x & y,
    BinaryOperator.SHIFT_RIGHT: lambda x, y: x >> y,
}


def to_dense(multi_vector_class: MultiVectorClass, value: Tuple[torch.Tensor, ...],
             basis_size: int) -> torch.Tensor:
    """Scatter class lanes into raw blade coefficients ``[..., basis_size]``."""
    flat = multi_vector_class.flat_basis()
    lanes = torch.cat(value, dim=-1)
    dense = lanes.new_zeros(lanes.shape[:-1] + (basis_size,))
    for position, element in enumerate(flat):
        dense[..., element.index] += lanes[..., position] * element.scalar
    return dense


def from_dense(multi_vector_class: MultiVectorClass, dense: torch.Tensor) -> Tuple[torch.Tensor, ...]:
    """Inverse of :func:`to_dense` restricted to the class blades."""
    groups = []
    for group in multi_vector_class.grouped_basis:
        groups.append(torch.stack(
            [dense[..., element.index] * element.scalar for element in group], dim=-1,
        ))
    return tuple(groups)


def random_value(multi_vector_class: MultiVectorClass, batch: Sequence[int] = (),
                 dtype=torch.float64, generator=None) -> Tuple[torch.Tensor, ...]:
    """Random lanes for every group of a class."""
    return tuple(
        torch.randn(tuple(batch) + (len(group),), dtype=dtype, generator=generator)
        for group in multi_vector_class.grouped_basis
    )


class Evaluator:
    """Executes operation definitions by name and parameter types.

    Args:
        definitions (iterable): Synthesized statements; anything that is not
            an :class:`OperationDefinition` is ignored.
        dtype (torch.dtype): Floating type for constants.
    """

    def __init__(self, definitions: Iterable, dtype=torch.float64):
        self.dtype = dtype
        self.definitions: Dict[tuple, OperationDefinition] = {}
        for node in definitions:
            if isinstance(node, OperationDefinition):
                self.definitions.setdefault(self.key(node), node)

    @staticmethod
    def key(definition: OperationDefinition) -> tuple:
        return (
            definition.operation,
            tuple(parameter.data_type for parameter in definition.parameters),
            definition.result.data_type,
        )

    def find(self, operation: Operation, parameter_types: Sequence, result_type=None) -> OperationDefinition:
        """Look up a definition; *result_type* is only needed to disambiguate."""
        parameter_types = tuple(parameter_types)
        if result_type is not None:
            return self.definitions[(operation, parameter_types, result_type)]
        matches = [
            definition for key, definition in self.definitions.items()
            if key[0] is operation and key[1] == parameter_types
        ]
        if len(matches) != 1:
            raise KeyError(f"{operation.value}{parameter_types}: {len(matches)} definitions")
        return matches[0]

    def call(self, definition: OperationDefinition, *arguments):
        """Run *definition* with positional argument values."""
        assert len(arguments) == len(definition.parameters), (
            f"{definition.operation.value} expects {len(definition.parameters)} arguments"
        )
        environment = {
            parameter.name: argument for parameter, argument in zip(definition.parameters, arguments)
        }
        returned, value = self._execute(definition.body, environment)
        assert returned, f"{definition.operation.value} finished without returning"
        return value

    def __call__(self, operation: Operation, parameter_types: Sequence, *arguments, result_type=None):
        return self.call(self.find(operation, parameter_types, result_type), *arguments)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _execute(self, body, environment):
        for statement in body:
            if isinstance(statement, ReturnStatement):
                return True, self.evaluate(statement.expression, environment)
            if isinstance(statement, VariableAssignment):
                environment[statement.name] = self.evaluate(statement.expression, environment)
            elif isinstance(statement, IfThenBlock):
                if self.evaluate(statement.condition, environment):
                    returned, value = self._execute(statement.body, environment)
                    if returned:
                        return True, value
            elif isinstance(statement, WhileLoopBlock):
                while self.evaluate(statement.condition, environment):
                    returned, value = self._execute(statement.body, environment)
                    if returned:
                        return True, value
            else:
                raise TypeError(f"cannot execute {type(statement).__name__}")
        return False, None

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    @staticmethod
    def _lanes(value):
        """Tensor view of a SIMD value; scalar classes unwrap to their group."""
        if isinstance(value, tuple):
            assert len(value) == 1, "only single-group values act as lane vectors"
            return value[0]
        return value

    def _invoke(self, method, parameter_types, result_type, arguments):
        definition = self.definitions.get((method, tuple(parameter_types), result_type))
        if definition is None:
            raise KeyError(f"no definition for {method.value}{tuple(parameter_types)}")
        return self.call(definition, *arguments)

    def evaluate(self, expression: Expression, environment):
        content = expression.content

        if isinstance(content, Variable):
            return environment[content.name]

        if isinstance(content, Constant):
            if isinstance(content.data_type, Integer):
                return content.values[0]
            return torch.tensor(content.values, dtype=self.dtype)

        if isinstance(content, InvokeClassMethod):
            if content.method is Builtin.CONSTRUCTOR:
                groups = []
                for data_type, argument in content.arguments:
                    lanes = self._lanes(self.evaluate(argument, environment))
                    groups.append(lanes.expand(lanes.shape[:-1] + (data_type.size,))
                                  if lanes.shape[-1] != data_type.size else lanes)
                return tuple(groups)
            return self._invoke(
                content.method,
                [data_type for data_type, _ in content.arguments],
                MultiVector(content.multi_vector_class),
                [self.evaluate(argument, environment) for _, argument in content.arguments],
            )

        if isinstance(content, InvokeInstanceMethod):
            instance = self.evaluate(content.instance, environment)
            if content.method is Builtin.ABS:
                return abs(instance)
            return self._invoke(
                content.method,
                [content.instance_type] + [data_type for data_type, _ in content.arguments],
                content.result_type,
                [instance] + [self.evaluate(argument, environment) for _, argument in content.arguments],
            )

        if isinstance(content, Conversion):
            return self._invoke(
                Operation.INTO, [MultiVector(content.source)], MultiVector(content.destination),
                [self.evaluate(content.inner, environment)],
            )

        if isinstance(content, Select):
            if self.evaluate(content.condition, environment):
                return self.evaluate(content.then_expression, environment)
            return self.evaluate(content.else_expression, environment)

        if isinstance(content, Access):
            value = self.evaluate(content.inner, environment)
            if isinstance(value, tuple):
                return value[content.group]
            return value

        if isinstance(content, Swizzle):
            value = self._lanes(self.evaluate(content.inner, environment))
            return value[..., list(content.lanes)]

        if isinstance(content, Gather):
            value = self.evaluate(content.inner, environment)
            if not isinstance(value, tuple):
                return value[..., [0] * len(content.indices)]
            return torch.stack([value[group][..., lane] for group, lane in content.indices], dim=-1)

        if isinstance(content, SquareRoot):
            return torch.sqrt(self._lanes(self.evaluate(content.inner, environment)))

        if isinstance(content, BinaryOperation):
            lhs = self.evaluate(content.lhs, environment)
            rhs = self.evaluate(content.rhs, environment)
            if isinstance(lhs, int) and isinstance(rhs, int):
                return _INTEGER_OPERATORS[content.operator](lhs, rhs)
            return _TENSOR_OPERATORS[content.operator](self._lanes(lhs), self._lanes(rhs))

        raise TypeError(f"cannot evaluate {type(content).__name__}")
