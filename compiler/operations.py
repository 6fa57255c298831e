# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Builders that turn algebraic facts into operation definitions.

Each builder is a pure function of the algebra tables, the registry and
previously derived definitions. A builder whose preconditions fail returns
:data:`ir.nodes.EMPTY`; it never raises for an algebra that is merely
incomplete.

Sign bookkeeping: a class blade ``x`` and the canonical blade ``c`` of the
same index differ by ``x.scalar * c.scalar``. Every lane factor below is the
product of such ratios with the table entry and the result blade's sign.
"""

from typing import Optional

from core.products import Involution, Product
from core.registry import MultiVectorClass, MultiVectorClassRegistry
from ir.nodes import (
    EMPTY,
    Access,
    BinaryOperator,
    Builtin,
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
    Parameter,
    ReturnStatement,
    Select,
    SimdVector,
    SquareRoot,
    VariableAssignment,
    WhileLoopBlock,
    binary,
    constant as literal,
    construct,
    invoke,
    variable,
)
from ir.simplify import simplify, zeros

ELEMENT_WISE_OPERATORS = {
    Operation.ADD: BinaryOperator.ADD,
    Operation.SUB: BinaryOperator.SUBTRACT,
    Operation.MUL: BinaryOperator.MULTIPLY,
    Operation.DIV: BinaryOperator.DIVIDE,
}


def multi_vector_parameter(name: str, multi_vector_class: MultiVectorClass) -> Parameter:
    return Parameter(name, MultiVector(multi_vector_class))


def _definition(operation, result_type, parameters, body) -> OperationDefinition:
    return OperationDefinition(Parameter(operation, result_type), tuple(parameters), tuple(body))


def _returning(operation, result_class, parameters, groups) -> OperationDefinition:
    return _definition(
        operation, MultiVector(result_class), parameters,
        [ReturnStatement(construct(result_class, groups))],
    )


def _scaled_gather(parameter: Parameter, indices, factors) -> Expression:
    """``gather(parameter, indices) * factors`` with unused lanes filled in."""
    size = len(factors)
    if all(factor == 0 for factor in factors):
        return zeros(size)
    filler = next(index for index in indices if index is not None)
    indices = tuple(filler if index is None else index for index in indices)
    gathered = Expression(size, Gather(variable(parameter), indices))
    return simplify(binary(BinaryOperator.MULTIPLY, gathered, literal(SimdVector(size), factors)))


# ----------------------------------------------------------------------
# Definitions from the algebra alone
# ----------------------------------------------------------------------

def constant(multi_vector_class: MultiVectorClass, operation: Operation) -> OperationDefinition:
    """``Zero`` or ``One`` of a class."""
    value = {Operation.ZERO: 0, Operation.ONE: 1}[operation]
    groups = []
    for group in multi_vector_class.grouped_basis:
        values = [value * element.scalar if element.index == 0 else 0 for element in group]
        groups.append(literal(SimdVector(len(group)), values))
    return _returning(operation, multi_vector_class, (), groups)


def involution(operation: Operation, mapping: Involution, parameter_a: Parameter,
               registry: MultiVectorClassRegistry,
               target: Optional[MultiVectorClass] = None):
    """Apply a basis map to the blades of ``A``.

    With *target* set this is the ``Into`` conversion: *mapping* is the
    projection onto the target's blades, and the image has to be the target
    class itself and differ from ``A``.
    """
    class_a = parameter_a.multi_vector_class()
    a_flat = class_a.flat_basis()
    a_positions = {element.index: position for position, element in enumerate(a_flat)}

    images = {}
    for key, value in mapping.terms:
        position = a_positions.get(key.index)
        if position is not None:
            images[value.index] = (position, key, value)
    if not images:
        return EMPTY

    result_signature = tuple(sorted(images))
    if target is not None and result_signature == class_a.signature():
        return EMPTY
    result_class = registry.get(result_signature)
    if result_class is None:
        return EMPTY
    if target is not None and result_class != target:
        return EMPTY

    groups = []
    for group in result_class.grouped_basis:
        indices, factors = [], []
        for result_element in group:
            position, key, value = images[result_element.index]
            indices.append(class_a.index_in_group(position))
            factors.append(a_flat[position].scalar * key.scalar * value.scalar * result_element.scalar)
        groups.append(_scaled_gather(parameter_a, indices, factors))
    return _returning(operation, result_class, (parameter_a,), groups)


def element_wise(operation: Operation, parameter_a: Parameter, parameter_b: Parameter,
                 registry: MultiVectorClassRegistry):
    """Lane-by-lane ``Add``/``Sub``/``Mul``/``Div`` over the union of blades."""
    operands = (parameter_a, parameter_b)
    result_signature = sorted({
        element.index
        for parameter in operands
        for element in parameter.multi_vector_class().flat_basis()
    })
    result_class = registry.get(result_signature)
    if result_class is None:
        return EMPTY

    groups = []
    for group in result_class.grouped_basis:
        terms = []
        for parameter in operands:
            multi_vector_class = parameter.multi_vector_class()
            flat = multi_vector_class.flat_basis()
            positions = {element.index: position for position, element in enumerate(flat)}
            indices, factors = [], []
            for result_element in group:
                position = positions.get(result_element.index)
                if position is None:
                    indices.append(None)
                    factors.append(0)
                else:
                    indices.append(multi_vector_class.index_in_group(position))
                    factors.append(flat[position].scalar * result_element.scalar)
            terms.append(_scaled_gather(parameter, indices, factors))
        groups.append(simplify(binary(ELEMENT_WISE_OPERATORS[operation], terms[0], terms[1])))
    return _returning(operation, result_class, operands, groups)


def product(operation: Operation, table: Product, parameter_a: Parameter,
            parameter_b: Parameter, registry: MultiVectorClassRegistry):
    """Bilinear product of ``A`` and ``B`` restricted to their blades.

    Every result lane is a sum over the blades of ``A``: the ``A`` lane is
    broadcast, multiplied by the matching ``B`` lanes and a sign vector.
    """
    class_a = parameter_a.multi_vector_class()
    class_b = parameter_b.multi_vector_class()
    a_flat, b_flat = class_a.flat_basis(), class_b.flat_basis()
    a_positions = {element.index for element in a_flat}
    b_positions = {element.index: position for position, element in enumerate(b_flat)}

    terms = {}
    for term in table.terms:
        if term.factor_a.index in a_positions and term.factor_b.index in b_positions:
            terms[(term.factor_a.index, term.product.index)] = term
    if not terms:
        return EMPTY
    result_class = registry.get(sorted({index for _, index in terms}))
    if result_class is None:
        return EMPTY

    groups = []
    for group in result_class.grouped_basis:
        size = len(group)
        total = None
        for a_position, a_element in enumerate(a_flat):
            lanes, signs = [], []
            for result_element in group:
                term = terms.get((a_element.index, result_element.index))
                if term is None:
                    lanes.append(None)
                    signs.append(0)
                    continue
                b_position = b_positions[term.factor_b.index]
                lanes.append(class_b.index_in_group(b_position))
                signs.append(
                    term.product.scalar * result_element.scalar
                    * a_element.scalar * term.factor_a.scalar
                    * b_flat[b_position].scalar * term.factor_b.scalar
                )
            if all(sign == 0 for sign in signs):
                continue
            broadcast = Expression(size, Gather(
                variable(parameter_a), (class_a.index_in_group(a_position),) * size,
            ))
            contribution = simplify(binary(
                BinaryOperator.MULTIPLY, broadcast, _scaled_gather(parameter_b, lanes, signs),
            ))
            total = contribution if total is None else simplify(
                binary(BinaryOperator.ADD, total, contribution)
            )
        groups.append(zeros(size) if total is None else total)
    return _returning(operation, result_class, (parameter_a, parameter_b), groups)


# ----------------------------------------------------------------------
# Definitions composed from earlier definitions
# ----------------------------------------------------------------------

def derive_squared_magnitude(scalar_product: OperationDefinition, reversal: OperationDefinition,
                             parameter_a: Parameter):
    """``a.scalar_product(a.reversal())``."""
    reversal_type = reversal.result.data_type
    if reversal_type != parameter_a.data_type:
        return EMPTY
    if scalar_product.parameters[1].data_type != reversal_type:
        return EMPTY
    if not scalar_product.result.data_type.is_scalar():
        return EMPTY
    this = variable(parameter_a)
    expression = invoke(this, parameter_a.data_type, scalar_product, (
        (reversal_type, invoke(this, parameter_a.data_type, reversal)),
    ))
    return _definition(Operation.SQUARED_MAGNITUDE, scalar_product.result.data_type,
                       (parameter_a,), [ReturnStatement(expression)])


def derive_magnitude(squared_magnitude: OperationDefinition, parameter_a: Parameter):
    """``sqrt(a.squared_magnitude())`` wrapped in the scalar class."""
    result_type = squared_magnitude.result.data_type
    squared = invoke(variable(parameter_a), parameter_a.data_type, squared_magnitude)
    root = Expression(1, SquareRoot(Expression(1, Access(squared, 0))))
    return _definition(Operation.MAGNITUDE, result_type, (parameter_a,), [
        ReturnStatement(construct(result_type.multi_vector_class, [root])),
    ])


def derive_scale(geometric_product: OperationDefinition, parameter_a: Parameter,
                 parameter_b: Parameter):
    """``a * s`` for a plain float ``s``, via the product with the scalar class."""
    if not parameter_b.data_type.is_scalar() or parameter_a.data_type.is_scalar():
        return EMPTY
    factor = Parameter(parameter_b.name, SimdVector(1))
    argument = construct(parameter_b.multi_vector_class(), [variable(factor)])
    expression = invoke(variable(parameter_a), parameter_a.data_type, geometric_product, (
        (parameter_b.data_type, argument),
    ))
    return _definition(Operation.SCALE, geometric_product.result.data_type,
                       (parameter_a, factor), [ReturnStatement(expression)])


def _reciprocal(definition: OperationDefinition, parameter_a: Parameter) -> Expression:
    """Scalar-class value ``1 / a.<definition>()``."""
    result_type = definition.result.data_type
    quotient = binary(
        BinaryOperator.DIVIDE,
        literal(SimdVector(1), (1,)),
        Expression(1, Access(invoke(variable(parameter_a), parameter_a.data_type, definition), 0)),
    )
    return construct(result_type.multi_vector_class, [quotient])


def derive_signum(geometric_product: OperationDefinition, magnitude: OperationDefinition,
                  parameter_a: Parameter):
    """``a * (1 / a.magnitude())``."""
    magnitude_type = magnitude.result.data_type
    if geometric_product.parameters[1].data_type != magnitude_type:
        return EMPTY
    expression = invoke(variable(parameter_a), parameter_a.data_type, geometric_product, (
        (magnitude_type, _reciprocal(magnitude, parameter_a)),
    ))
    return _definition(Operation.SIGNUM, geometric_product.result.data_type,
                       (parameter_a,), [ReturnStatement(expression)])


def derive_inverse(geometric_product: OperationDefinition, squared_magnitude: OperationDefinition,
                   reversal: OperationDefinition, parameter_a: Parameter):
    """``a.reversal() * (1 / a.squared_magnitude())``."""
    reversal_type = reversal.result.data_type
    squared_type = squared_magnitude.result.data_type
    if geometric_product.parameters[0].data_type != reversal_type:
        return EMPTY
    if geometric_product.parameters[1].data_type != squared_type:
        return EMPTY
    reversed_a = invoke(variable(parameter_a), parameter_a.data_type, reversal)
    expression = invoke(reversed_a, reversal_type, geometric_product, (
        (squared_type, _reciprocal(squared_magnitude, parameter_a)),
    ))
    return _definition(Operation.INVERSE, geometric_product.result.data_type,
                       (parameter_a,), [ReturnStatement(expression)])


def derive_power_of_integer(geometric_product: OperationDefinition, one: OperationDefinition,
                            inverse: OperationDefinition, parameter_a: Parameter,
                            exponent: Parameter):
    """Exponentiation by squaring; negative exponents start from the inverse."""
    data_type = parameter_a.data_type
    if not (geometric_product.result.data_type == one.result.data_type
            == inverse.result.data_type == data_type):
        return EMPTY
    multi_vector_class = parameter_a.multi_vector_class()
    x = Parameter("x", data_type)
    y = Parameter("y", data_type)
    n = Parameter("n", Integer())

    def integer(value):
        return literal(Integer(), (value,))

    def multiply(lhs, rhs):
        return invoke(variable(lhs), data_type, geometric_product, ((data_type, variable(rhs)),))

    identity = Expression(1, InvokeClassMethod(multi_vector_class, Operation.ONE))
    body = [
        IfThenBlock(binary(BinaryOperator.EQUAL, variable(exponent), integer(0)), (
            ReturnStatement(identity),
        )),
        VariableAssignment("x", data_type, Expression(1, Select(
            binary(BinaryOperator.LESS_THAN, variable(exponent), integer(0)),
            invoke(variable(parameter_a), data_type, inverse),
            variable(parameter_a),
        ))),
        VariableAssignment("y", data_type, identity),
        VariableAssignment("n", Integer(), Expression(1, InvokeInstanceMethod(
            Integer(), variable(exponent), Builtin.ABS, Integer(),
        ))),
        WhileLoopBlock(binary(BinaryOperator.LESS_THAN, integer(1), variable(n)), (
            IfThenBlock(
                binary(BinaryOperator.EQUAL,
                       binary(BinaryOperator.LOGIC_AND, variable(n), integer(1)), integer(1)),
                (VariableAssignment("y", None, multiply(x, y)),),
            ),
            VariableAssignment("x", None, multiply(x, x)),
            VariableAssignment("n", None, binary(BinaryOperator.SHIFT_RIGHT, variable(n), integer(1))),
        )),
        ReturnStatement(multiply(x, y)),
    ]
    return _definition(Operation.POWI, data_type, (parameter_a, exponent), body)


def derive_division(geometric_product: OperationDefinition, inverse: OperationDefinition,
                    parameter_a: Parameter, parameter_b: Parameter):
    """``a * b.inverse()``."""
    if inverse.result.data_type != parameter_b.data_type:
        return EMPTY
    expression = invoke(variable(parameter_a), parameter_a.data_type, geometric_product, (
        (parameter_b.data_type, invoke(variable(parameter_b), parameter_b.data_type, inverse)),
    ))
    return _definition(Operation.GEOMETRIC_QUOTIENT, geometric_product.result.data_type,
                       (parameter_a, parameter_b), [ReturnStatement(expression)])


def derive_sandwich_product(geometric_product: OperationDefinition,
                            geometric_product_2: OperationDefinition,
                            reversal: OperationDefinition,
                            conversion: Optional[OperationDefinition],
                            parameter_a: Parameter, parameter_b: Parameter):
    """``a * b * a.reversal()``, converted back into ``B`` when needed."""
    first_type = geometric_product.result.data_type
    second_type = geometric_product_2.result.data_type
    reversal_type = reversal.result.data_type
    if geometric_product_2.parameters[0].data_type != first_type:
        return EMPTY
    if geometric_product_2.parameters[1].data_type != reversal_type:
        return EMPTY
    if conversion is None:
        if second_type != parameter_b.data_type:
            return EMPTY
    elif (conversion.parameters[0].data_type != second_type
          or conversion.result.data_type != parameter_b.data_type):
        return EMPTY

    this = variable(parameter_a)
    first = invoke(this, parameter_a.data_type, geometric_product, (
        (parameter_b.data_type, variable(parameter_b)),
    ))
    expression = invoke(first, first_type, geometric_product_2, (
        (reversal_type, invoke(this, parameter_a.data_type, reversal)),
    ))
    if conversion is not None:
        expression = Expression(1, Conversion(
            second_type.multi_vector_class, parameter_b.multi_vector_class(), expression,
        ))
    return _definition(Operation.TRANSFORMATION, parameter_b.data_type,
                       (parameter_a, parameter_b), [ReturnStatement(expression)])
