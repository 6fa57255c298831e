# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""GLSL renderer: one struct per class, one free function per operation."""

from emitters.common import (
    Renderer,
    camel_to_snake_case,
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

COMPONENTS = "xyzw"

PRECEDENCE = {
    BinaryOperator.MULTIPLY: 7,
    BinaryOperator.DIVIDE: 7,
    BinaryOperator.ADD: 6,
    BinaryOperator.SUBTRACT: 6,
    BinaryOperator.SHIFT_RIGHT: 5,
    BinaryOperator.LESS_THAN: 4,
    BinaryOperator.EQUAL: 3,
    BinaryOperator.LOGIC_AND: 2,
}


def data_type(data_type) -> str:
    if isinstance(data_type, Integer):
        return "int"
    if isinstance(data_type, SimdVector):
        return "float" if data_type.size == 1 else f"vec{data_type.size}"
    if data_type.is_scalar():
        return "float"
    return data_type.multi_vector_class.class_name


def _class_prefix(data_type) -> str:
    if isinstance(data_type, MultiVector):
        return camel_to_snake_case(data_type.multi_vector_class.class_name) + "_"
    return ""


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
        name = _class_prefix(content.instance_type)
        name += "".join(_class_prefix(argument_type) for argument_type, _ in content.arguments)
        name += camel_to_snake_case(content.method.value)
        arguments = [expression(content.instance)] + [expression(argument) for _, argument in content.arguments]
        return f"{name}({', '.join(arguments)})"

    if isinstance(content, InvokeClassMethod):
        multi_vector_class = content.multi_vector_class
        arguments = ", ".join(expression(argument) for _, argument in content.arguments)
        if content.method is Builtin.CONSTRUCTOR:
            if multi_vector_class.is_scalar():
                return expression(content.arguments[0][1])
            return f"{multi_vector_class.class_name}({arguments})"
        name = f"{camel_to_snake_case(multi_vector_class.class_name)}_{camel_to_snake_case(content.method.value)}"
        return f"{name}({arguments})"

    if isinstance(content, Conversion):
        source = camel_to_snake_case(content.source.class_name)
        destination = camel_to_snake_case(content.destination.class_name)
        return f"{source}_{destination}_into({expression(content.inner)})"

    if isinstance(content, Select):
        return (f"({expression(content.condition)}) ? {expression(content.then_expression)} "
                f": {expression(content.else_expression)}")

    if isinstance(content, Access):
        inner = expression(content.inner)
        if content.inner.is_scalar():
            return inner
        return f"{inner}.g{content.group}"

    if isinstance(content, Swizzle):
        lanes = "".join(COMPONENTS[lane] for lane in content.lanes)
        return f"{expression(content.inner)}.{lanes}"

    if isinstance(content, Gather):
        inner = expression(content.inner)
        if content.inner.is_scalar():
            components = [inner] * len(content.indices)
        else:
            components = []
            for group, lane in content.indices:
                component = f"{inner}.g{group}"
                if source_group_size(content.inner, group) != 1:
                    component += f".{COMPONENTS[lane]}"
                components.append(component)
        if node.size == 1:
            return components[0]
        if is_splat(components):
            return f"vec{node.size}({components[0]})"
        return f"vec{node.size}({', '.join(components)})"

    if isinstance(content, Constant):
        if isinstance(content.data_type, Integer):
            return str(content.values[0])
        values = [format_float(value) for value in content.values]
        if node.size == 1:
            return values[0]
        if is_splat(values):
            return f"vec{node.size}({values[0]})"
        return f"vec{node.size}({', '.join(values)})"

    if isinstance(content, SquareRoot):
        return f"sqrt({expression(content.inner)})"

    if isinstance(content, BinaryOperation):
        lhs = _operand(content.lhs, content.operator, right=False)
        rhs = _operand(content.rhs, content.operator, right=True)
        return f"{lhs} {content.operator.value} {rhs}"

    raise TypeError(f"no GLSL rendering for {type(content).__name__}")


def statement(node, level: int) -> str:
    if isinstance(node, ReturnStatement):
        return f"return {expression(node.expression)};\n"
    if isinstance(node, VariableAssignment):
        target = node.name if node.data_type is None else f"{data_type(node.data_type)} {node.name}"
        return f"{target} = {expression(node.expression)};\n"
    if isinstance(node, (IfThenBlock, WhileLoopBlock)):
        keyword = "if" if isinstance(node, IfThenBlock) else "while"
        lines = [f"{keyword}({expression(node.condition)}) {{\n"]
        for inner in node.body:
            lines.append(indentation(level + 1) + statement(inner, level + 1))
        lines.append(indentation(level) + "}\n")
        return "".join(lines)
    raise TypeError(f"no GLSL rendering for {type(node).__name__}")


def class_definition(multi_vector_class) -> str:
    if multi_vector_class.is_scalar():
        return ""
    out = [f"struct {multi_vector_class.class_name} {{\n"]
    for position, group in enumerate(multi_vector_class.grouped_basis):
        out.append(f"    // {', '.join(str(element) for element in group)}\n")
        out.append(f"    {data_type(SimdVector(len(group)))} g{position};\n")
    out.append("};\n\n")
    return "".join(out)


def function_name(definition: OperationDefinition) -> str:
    """``<class>[_<class>]_<operation>`` in snake case."""
    parameters = definition.parameters
    operation = camel_to_snake_case(definition.operation.value)
    if not parameters:
        prefix = camel_to_snake_case(definition.result.multi_vector_class().class_name)
    elif definition.operation is Operation.INTO:
        prefix = "_".join(camel_to_snake_case(class_name) for class_name in (
            parameters[0].multi_vector_class().class_name,
            definition.result.multi_vector_class().class_name,
        ))
    else:
        prefix = "_".join(
            camel_to_snake_case(parameter.multi_vector_class().class_name)
            for parameter in parameters if isinstance(parameter.data_type, MultiVector)
        )
    return f"{prefix}_{operation}"


def operation_definition(definition: OperationDefinition) -> str:
    parameters = ", ".join(f"{data_type(parameter.data_type)} {parameter.name}"
                           for parameter in definition.parameters)
    out = [f"{data_type(definition.result.data_type)} {function_name(definition)}({parameters}) {{\n"]
    for node in definition.body:
        out.append(indentation(1) + statement(node, 1))
    out.append("}\n\n")
    return "".join(out)


class GlslRenderer(Renderer):
    extension = "glsl"

    def render(self, node) -> str:
        if isinstance(node, (Empty, Preamble)):
            return ""
        if isinstance(node, ClassDefinition):
            return class_definition(node.multi_vector_class)
        if isinstance(node, OperationDefinition):
            return operation_definition(node)
        return statement(node, 0)
