# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Rust renderer.

Each class becomes a ``union`` of a SIMD group struct and a flat ``f32``
array; each operation becomes a trait implementation. Scalar classes are
plain ``f32`` and operations purely between scalars are left to the
language.
"""

from emitters.common import (
    Renderer,
    camel_to_snake_case,
    element_name,
    format_float,
    indentation,
    is_splat,
    source_group_size,
)
from ir.nodes import (
    Access,
    BinaryOperation,
    BinaryOperator,
    Builtin,
    ClassDefinition,
    Constant,
    Conversion,
    Empty,
    Expression,
    Gather,
    IfThenBlock,
    Integer,
    InvokeClassMethod,
    InvokeInstanceMethod,
    MultiVector,
    Operation,
    OperationDefinition,
    Preamble,
    ReturnStatement,
    Select,
    SimdVector,
    SquareRoot,
    Swizzle,
    Variable,
    VariableAssignment,
    WhileLoopBlock,
)

PREAMBLE = (
    "#![allow(clippy::assign_op_pattern)]\n"
    "use crate::{simd::*, *};\n"
    "use std::ops::{Add, AddAssign, Div, DivAssign, Mul, MulAssign, Neg, Sub, SubAssign};\n\n"
)

# Operations rendered through a differently named trait.
TRAIT_NAMES = {Operation.SCALE: "Mul"}

ASSIGN_OPERATIONS = {Operation.ADD, Operation.SUB, Operation.MUL, Operation.DIV, Operation.SCALE}

PRECEDENCE = {
    BinaryOperator.SHIFT_RIGHT: 4,
    BinaryOperator.MULTIPLY: 6,
    BinaryOperator.DIVIDE: 6,
    BinaryOperator.ADD: 5,
    BinaryOperator.SUBTRACT: 5,
    BinaryOperator.LOGIC_AND: 3,
    BinaryOperator.LESS_THAN: 1,
    BinaryOperator.EQUAL: 1,
}


def data_type(data_type) -> str:
    if isinstance(data_type, Integer):
        return "isize"
    if isinstance(data_type, SimdVector):
        return "f32" if data_type.size == 1 else f"Simd32x{data_type.size}"
    if data_type.is_scalar():
        return "f32"
    return data_type.multi_vector_class.class_name


def _arguments(arguments) -> str:
    return ", ".join(expression(argument) for _, argument in arguments)


def _operand(operand: Expression, operator: BinaryOperator, right: bool) -> str:
    text = expression(operand)
    content = operand.content
    if isinstance(content, BinaryOperation):
        inner, outer = PRECEDENCE[content.operator], PRECEDENCE[operator]
        if inner < outer or (right and inner == outer and operator not in (BinaryOperator.ADD, BinaryOperator.MULTIPLY)):
            return f"({text})"
    return text


def expression(node: Expression) -> str:
    content = node.content

    if isinstance(content, Variable):
        return content.name

    if isinstance(content, InvokeInstanceMethod):
        method = camel_to_snake_case(content.method.value)
        return f"{expression(content.instance)}.{method}({_arguments(content.arguments)})"

    if isinstance(content, InvokeClassMethod):
        multi_vector_class = content.multi_vector_class
        if content.method is Builtin.CONSTRUCTOR:
            if multi_vector_class.is_scalar():
                return expression(content.arguments[0][1])
            name = multi_vector_class.class_name
            fields = ", ".join(
                f"g{position}: {expression(argument)}"
                for position, (_, argument) in enumerate(content.arguments)
            )
            return f"{name} {{ groups: {name}Groups {{ {fields} }} }}"
        method = camel_to_snake_case(content.method.value)
        return f"{data_type(MultiVector(multi_vector_class))}::{method}({_arguments(content.arguments)})"

    if isinstance(content, Conversion):
        return f"{expression(content.inner)}.into()"

    if isinstance(content, Select):
        return (f"if {expression(content.condition)} {{ {expression(content.then_expression)} }} "
                f"else {{ {expression(content.else_expression)} }}")

    if isinstance(content, Access):
        inner = expression(content.inner)
        if content.inner.is_scalar():
            return inner
        return f"{inner}.group{content.group}()"

    if isinstance(content, Swizzle):
        inner = expression(content.inner)
        if node.size == 1:
            return f"{inner}[{content.lanes[0]}]" if content.inner.size > 1 else inner
        return f"swizzle!({inner}, {', '.join(str(lane) for lane in content.lanes)})"

    if isinstance(content, Gather):
        inner = expression(content.inner)
        if content.inner.is_scalar():
            components = [inner] * len(content.indices)
        else:
            components = []
            for group, lane in content.indices:
                component = f"{inner}.group{group}()"
                if source_group_size(content.inner, group) != 1:
                    component += f"[{lane}]"
                components.append(component)
        if node.size == 1:
            return components[0]
        if is_splat(components):
            return f"{data_type(SimdVector(node.size))}::from({components[0]})"
        return f"{data_type(SimdVector(node.size))}::from([{', '.join(components)}])"

    if isinstance(content, Constant):
        if isinstance(content.data_type, Integer):
            return str(content.values[0])
        values = [format_float(value) for value in content.values]
        if node.size == 1:
            return values[0]
        if is_splat(values):
            return f"{data_type(SimdVector(node.size))}::from({values[0]})"
        return f"{data_type(SimdVector(node.size))}::from([{', '.join(values)}])"

    if isinstance(content, SquareRoot):
        return f"{expression(content.inner)}.sqrt()"

    if isinstance(content, BinaryOperation):
        lhs = _operand(content.lhs, content.operator, right=False)
        rhs = _operand(content.rhs, content.operator, right=True)
        return f"{lhs} {content.operator.value} {rhs}"

    raise TypeError(f"no Rust rendering for {type(content).__name__}")


def statement(node, level: int) -> str:
    """One statement (with nested blocks), without leading indentation."""
    if isinstance(node, ReturnStatement):
        return f"return {expression(node.expression)};\n"
    if isinstance(node, VariableAssignment):
        target = node.name if node.data_type is None else f"let mut {node.name}: {data_type(node.data_type)}"
        return f"{target} = {expression(node.expression)};\n"
    if isinstance(node, (IfThenBlock, WhileLoopBlock)):
        keyword = "if" if isinstance(node, IfThenBlock) else "while"
        lines = [f"{keyword} {expression(node.condition)} {{\n"]
        for inner in node.body:
            lines.append(indentation(level + 1) + statement(inner, level + 1))
        lines.append(indentation(level) + "}\n")
        return "".join(lines)
    raise TypeError(f"no Rust rendering for {type(node).__name__}")


def _simd_widths(multi_vector_class):
    return [1 if len(group) == 1 else 4 for group in multi_vector_class.grouped_basis]


def class_definition(multi_vector_class) -> str:
    if multi_vector_class.is_scalar():
        return ""
    name = multi_vector_class.class_name
    remap_name = f"{name.upper()}_INDEX_REMAP"
    groups = multi_vector_class.grouped_basis
    flat = multi_vector_class.flat_basis()
    widths = _simd_widths(multi_vector_class)
    count = len(flat)

    out = [f"#[derive(Clone, Copy)]\nstruct {name}Groups {{\n"]
    for position, group in enumerate(groups):
        out.append(f"    /// {', '.join(str(element) for element in group)}\n")
        out.append(f"    g{position}: {data_type(SimdVector(len(group)))},\n")
    out.append("}\n\n")

    padded = []
    for group, width in zip(groups, widths):
        padded += [str(element) for element in group] + ["0"] * (width - len(group))
    out.append(f"#[derive(Clone, Copy)]\npub union {name} {{\n")
    out.append(f"    groups: {name}Groups,\n")
    out.append(f"    /// {', '.join(padded)}\n")
    out.append(f"    elements: [f32; {sum(widths)}],\n")
    out.append("}\n\n")

    out.append(f"impl {name} {{\n")
    out.append("    #[allow(clippy::too_many_arguments)]\n")
    arguments = ", ".join(f"{element_name(element)}: f32" for element in flat)
    out.append(f"    pub const fn new({arguments}) -> Self {{\n")
    elements = []
    for group, width in zip(groups, widths):
        elements += [element_name(element) for element in group] + ["0.0"] * (width - len(group))
    out.append(f"        Self {{ elements: [{', '.join(elements)}] }}\n")
    out.append("    }\n")
    group_arguments = ", ".join(
        f"g{position}: {data_type(SimdVector(len(group)))}" for position, group in enumerate(groups)
    )
    group_names = ", ".join(f"g{position}" for position in range(len(groups)))
    out.append(f"    pub const fn from_groups({group_arguments}) -> Self {{\n")
    out.append(f"        Self {{ groups: {name}Groups {{ {group_names} }} }}\n")
    out.append("    }\n")
    for position, group in enumerate(groups):
        simd = data_type(SimdVector(len(group)))
        out.append("    #[inline(always)]\n")
        out.append(f"    pub fn group{position}(&self) -> {simd} {{\n")
        out.append(f"        unsafe {{ self.groups.g{position} }}\n")
        out.append("    }\n")
        out.append("    #[inline(always)]\n")
        out.append(f"    pub fn group{position}_mut(&mut self) -> &mut {simd} {{\n")
        out.append(f"        unsafe {{ &mut self.groups.g{position} }}\n")
        out.append("    }\n")
    out.append("}\n\n")

    remap = []
    offset = 0
    for group, width in zip(groups, widths):
        remap += [offset + lane for lane in range(len(group))]
        offset += max(width, len(group))
    out.append(f"const {remap_name}: [usize; {count}] = [{', '.join(str(index) for index in remap)}];\n\n")

    out.append(f"impl std::ops::Index<usize> for {name} {{\n")
    out.append("    type Output = f32;\n\n")
    out.append("    fn index(&self, index: usize) -> &Self::Output {\n")
    out.append(f"        unsafe {{ &self.elements[{remap_name}[index]] }}\n")
    out.append("    }\n}\n\n")

    out.append(f"impl std::ops::IndexMut<usize> for {name} {{\n")
    out.append("    fn index_mut(&mut self, index: usize) -> &mut Self::Output {\n")
    out.append(f"        unsafe {{ &mut self.elements[{remap_name}[index]] }}\n")
    out.append("    }\n}\n\n")

    out.append(f"impl std::convert::From<{name}> for [f32; {count}] {{\n")
    out.append(f"    fn from(vector: {name}) -> Self {{\n")
    out.append(f"        unsafe {{ [{', '.join(f'vector.elements[{index}]' for index in remap)}] }}\n")
    out.append("    }\n}\n\n")

    array = []
    position = 0
    for group, width in zip(groups, widths):
        for _ in group:
            array.append(f"array[{position}]")
            position += 1
        array += ["0.0"] * (width - len(group))
    out.append(f"impl std::convert::From<[f32; {count}]> for {name} {{\n")
    out.append(f"    fn from(array: [f32; {count}]) -> Self {{\n")
    out.append(f"        Self {{ elements: [{', '.join(array)}] }}\n")
    out.append("    }\n}\n\n")

    out.append(f"impl std::fmt::Debug for {name} {{\n")
    out.append("    fn fmt(&self, formatter: &mut std::fmt::Formatter) -> std::fmt::Result {\n")
    out.append("        formatter\n")
    out.append(f"            .debug_struct(\"{name}\")\n")
    for position, element in enumerate(flat):
        out.append(f"            .field(\"{element}\", &self[{position}])\n")
    out.append("            .finish()\n")
    out.append("    }\n}\n\n")
    return "".join(out)


def _is_pure_scalar(definition: OperationDefinition) -> bool:
    if not definition.result.data_type.is_scalar():
        return False
    return not any(
        isinstance(parameter.data_type, MultiVector) and not parameter.data_type.is_scalar()
        for parameter in definition.parameters
    )


def operation_definition(definition: OperationDefinition) -> str:
    if _is_pure_scalar(definition):
        return ""
    operation = definition.operation
    parameters = definition.parameters
    result_type = data_type(definition.result.data_type)
    trait = TRAIT_NAMES.get(operation, operation.value)
    method = camel_to_snake_case(trait)

    if not parameters:
        header = f"impl {trait} for {result_type}"
    elif operation is Operation.INTO:
        header = f"impl {trait}<{result_type}> for {data_type(parameters[0].data_type)}"
    elif len(parameters) == 1 or isinstance(parameters[1].data_type, Integer):
        header = f"impl {trait} for {data_type(parameters[0].data_type)}"
    else:
        header = f"impl {trait}<{data_type(parameters[1].data_type)}> for {data_type(parameters[0].data_type)}"

    out = [header, " {\n"]
    if parameters and operation is not Operation.INTO:
        out.append(f"    type Output = {result_type};\n\n")
    if not parameters:
        signature = f"fn {method}() -> Self"
    elif len(parameters) == 1:
        signature = f"fn {method}({parameters[0].name}) -> {result_type}"
    else:
        signature = (f"fn {method}({parameters[0].name}, {parameters[1].name}: "
                     f"{data_type(parameters[1].data_type)}) -> {result_type}")
    out.append(f"    {signature} {{\n")
    for position, node in enumerate(definition.body):
        if position + 1 == len(definition.body) and isinstance(node, ReturnStatement):
            out.append(f"        {expression(node.expression)}\n")
        else:
            out.append("        " + statement(node, 2))
    out.append("    }\n}\n\n")

    if (operation in ASSIGN_OPERATIONS
            and definition.result.data_type == parameters[0].data_type):
        other = data_type(parameters[1].data_type)
        out.append(f"impl {trait}Assign<{other}> for {data_type(parameters[0].data_type)} {{\n")
        out.append(f"    fn {method}_assign(&mut self, other: {other}) {{\n")
        out.append(f"        *self = (*self).{method}(other);\n")
        out.append("    }\n}\n\n")
    return "".join(out)


class RustRenderer(Renderer):
    extension = "rs"

    def render(self, node) -> str:
        if isinstance(node, Empty):
            return ""
        if isinstance(node, Preamble):
            return PREAMBLE
        if isinstance(node, ClassDefinition):
            return class_definition(node.multi_vector_class)
        if isinstance(node, OperationDefinition):
            return operation_definition(node)
        return statement(node, 0)
