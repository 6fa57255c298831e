# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""Local simplification and legalization of IR expressions.

Only structural rewrites: gathers from a single group become group accesses
or swizzles, and multiplications / additions with trivial constants fold away.
No algebraic reasoning beyond that happens here.
"""

from ir.nodes import (
    Access,
    BinaryOperation,
    BinaryOperator,
    Constant,
    Expression,
    Gather,
    MultiVector,
    SimdVector,
    Swizzle,
    Variable,
)


def _constant_values(expression: Expression):
    if isinstance(expression.content, Constant):
        return expression.content.values
    return None


def _is_uniform(expression: Expression, value: int) -> bool:
    values = _constant_values(expression)
    return values is not None and len(values) > 0 and all(v == value for v in values)


def zeros(size: int) -> Expression:
    return Expression(size, Constant(SimdVector(size), (0,) * size))


def _group_sizes(inner: Expression):
    """Group sizes of a non-scalar multivector variable, else ``None``."""
    if not isinstance(inner.content, Variable):
        return None
    data_type = inner.content.data_type
    if not isinstance(data_type, MultiVector) or data_type.is_scalar():
        return None
    return [len(group) for group in data_type.multi_vector_class.grouped_basis]


def _simplify_gather(expression: Expression) -> Expression:
    gather = expression.content
    group_sizes = _group_sizes(gather.inner)
    if group_sizes is None:
        return expression
    groups = {group for group, _ in gather.indices}
    if len(groups) != 1:
        return expression
    group = groups.pop()
    group_size = group_sizes[group]
    lanes = tuple(lane for _, lane in gather.indices)
    access = Expression(group_size, Access(gather.inner, group))
    if lanes == tuple(range(group_size)):
        return access
    if group_size == 1:
        # Broadcast of a single-lane group stays a gather (a splat).
        return expression
    return Expression(expression.size, Swizzle(access, lanes))


def _simplify_binary(expression: Expression) -> Expression:
    operation = expression.content
    lhs, rhs = simplify(operation.lhs), simplify(operation.rhs)
    size = expression.size
    operator = operation.operator

    if operator is BinaryOperator.MULTIPLY:
        if _is_uniform(lhs, 0) or _is_uniform(rhs, 0):
            return zeros(size)
        if _is_uniform(rhs, 1) and lhs.size == size:
            return lhs
        if _is_uniform(lhs, 1) and rhs.size == size:
            return rhs
    elif operator is BinaryOperator.ADD:
        if _is_uniform(lhs, 0) and rhs.size == size:
            return rhs
        if _is_uniform(rhs, 0) and lhs.size == size:
            return lhs
        negated = rhs.content
        if (isinstance(negated, BinaryOperation)
                and negated.operator is BinaryOperator.MULTIPLY
                and _is_uniform(negated.rhs, -1)):
            return Expression(size, BinaryOperation(BinaryOperator.SUBTRACT, lhs, negated.lhs))
    elif operator is BinaryOperator.SUBTRACT:
        if _is_uniform(rhs, 0) and lhs.size == size:
            return lhs

    return Expression(size, BinaryOperation(operator, lhs, rhs))


def simplify(expression: Expression) -> Expression:
    """Return a structurally simplified copy of *expression*."""
    content = expression.content
    if isinstance(content, Gather):
        return _simplify_gather(expression)
    if isinstance(content, BinaryOperation):
        return _simplify_binary(expression)
    return expression
