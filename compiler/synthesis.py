# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Phased derivation of every operation an algebra supports.

Phases run in a fixed order and each one only reads definitions recorded by
earlier phases:

1. preamble and one class definition per registered class;
2. per class: ``Zero``, ``One`` and the five involutions, then per ordered
   class pair: ``Into``, element-wise arithmetic and the seven products;
3. per class: ``SquaredMagnitude`` and ``Magnitude``;
4. per class with a scalar partner: ``Scale``, ``Signum`` and ``Inverse``;
5. per ordered pair: ``Powi``, ``GeometricQuotient`` and ``Transformation``.

Tables are keyed by registry position. The first definition recorded for a
key wins; later ones are neither stored nor emitted.
"""

from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Tuple

from compiler import operations
from core.algebra import GeometricAlgebra
from core.products import Involution, involutions, products
from core.registry import MultiVectorClass, MultiVectorClassRegistry
from ir.nodes import (
    EMPTY,
    PREAMBLE,
    ClassDefinition,
    Integer,
    Operation,
    OperationDefinition,
    Parameter,
    Statement,
)
from log import get_logger

logger = get_logger(__name__)

OperationTable = Dict[Operation, OperationDefinition]

SELF = "self"
OTHER = "other"


class Synthesizer:
    """Derives operation definitions for every class of a registry.

    Args:
        algebra (GeometricAlgebra): Algebra the classes live in.
        registry (MultiVectorClassRegistry): Classes to derive for.
        exclude (iterable, optional): Operations never to record. Anything
            composed from an excluded operation disappears with it.

    Attributes:
        single_tables (dict): registry position -> per-class operations.
        pair_tables (dict): ``(position_a, position_b)`` -> pair operations.
    """

    def __init__(self, algebra: GeometricAlgebra, registry: MultiVectorClassRegistry,
                 exclude: Iterable[Operation] = ()):
        self.algebra = algebra
        self.registry = registry
        self.exclude: FrozenSet[Operation] = frozenset(exclude)
        self.involutions = [(Operation(name), table) for name, table in involutions(algebra)]
        self.products = [(Operation(name), table) for name, table in products(algebra)]
        self.single_tables: Dict[int, OperationTable] = {}
        self.pair_tables: Dict[Tuple[int, int], OperationTable] = {}

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def single(self, position: int) -> OperationTable:
        return self.single_tables.setdefault(position, {})

    def pair(self, position_a: int, position_b: int) -> OperationTable:
        return self.pair_tables.setdefault((position_a, position_b), {})

    def lookup(self, operation: Operation, class_a: MultiVectorClass,
               class_b: Optional[MultiVectorClass] = None) -> Optional[OperationDefinition]:
        """Recorded definition of *operation* for a class or class pair."""
        position_a = self.registry.index_of(class_a)
        if class_b is None:
            return self.single_tables.get(position_a, {}).get(operation)
        position_b = self.registry.index_of(class_b)
        return self.pair_tables.get((position_a, position_b), {}).get(operation)

    def _record(self, table: OperationTable, node) -> Optional[OperationDefinition]:
        """Store *node* unless it is empty, excluded or already defined."""
        if node == EMPTY:
            return None
        operation = node.operation
        if operation in self.exclude or operation in table:
            return None
        table[operation] = node
        logger.debug("%s(%s)", operation.value,
                     ", ".join(str(parameter.name) for parameter in node.parameters))
        return node

    def _position(self, definition: OperationDefinition) -> int:
        return self.registry.index_of(definition.result.data_type.multi_vector_class)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def run(self) -> Iterator[Statement]:
        """Yield the preamble, class definitions and operations in order."""
        classes = self.registry.classes
        yield PREAMBLE
        for multi_vector_class in classes:
            yield ClassDefinition(multi_vector_class)

        phases = (
            ("basic", self._basic_operations),
            ("magnitude", self._magnitude_operations),
            ("scalar", self._scalar_operations),
            ("composite", self._composite_operations),
        )
        for name, phase in phases:
            count = 0
            for node in phase():
                count += 1
                yield node
            logger.info("Phase %-10s %5d operations", name, count)

    def _basic_operations(self) -> Iterator[OperationDefinition]:
        registry = self.registry
        classes = registry.classes
        for position_a, class_a in enumerate(classes):
            parameter_a = operations.multi_vector_parameter(SELF, class_a)
            single = self.single(position_a)
            candidates = [operations.constant(class_a, operation)
                          for operation in (Operation.ZERO, Operation.ONE)]
            candidates += [operations.involution(operation, table, parameter_a, registry)
                           for operation, table in self.involutions]
            for node in candidates:
                if self._record(single, node) is not None:
                    yield node

            for position_b, class_b in enumerate(classes):
                parameter_b = operations.multi_vector_parameter(OTHER, class_b)
                table = self.pair(position_a, position_b)
                candidates = []
                if class_a != class_b:
                    candidates.append(operations.involution(
                        Operation.INTO, Involution.projection(class_b.flat_basis()),
                        parameter_a, registry, target=class_b,
                    ))
                element_wise = [Operation.ADD, Operation.SUB]
                if class_a == class_b:
                    element_wise += [Operation.MUL, Operation.DIV]
                candidates += [operations.element_wise(operation, parameter_a, parameter_b, registry)
                               for operation in element_wise]
                candidates += [operations.product(operation, product, parameter_a, parameter_b, registry)
                               for operation, product in self.products]
                for node in candidates:
                    if self._record(table, node) is not None:
                        yield node

    def _magnitude_operations(self) -> Iterator[OperationDefinition]:
        for position_a, class_a in enumerate(self.registry.classes):
            parameter_a = operations.multi_vector_parameter(SELF, class_a)
            single = self.single(position_a)
            scalar_product = self.pair(position_a, position_a).get(Operation.SCALAR_PRODUCT)
            reversal = single.get(Operation.REVERSAL)
            if scalar_product is None or reversal is None:
                continue
            squared_magnitude = self._record(single, operations.derive_squared_magnitude(
                scalar_product, reversal, parameter_a,
            ))
            if squared_magnitude is None:
                continue
            yield squared_magnitude
            magnitude = self._record(single, operations.derive_magnitude(squared_magnitude, parameter_a))
            if magnitude is not None:
                yield magnitude

    def _scalar_operations(self) -> Iterator[OperationDefinition]:
        classes = self.registry.classes
        for position_a, class_a in enumerate(classes):
            parameter_a = operations.multi_vector_parameter(SELF, class_a)
            single = self.single(position_a)
            for position_b, class_b in enumerate(classes):
                if not class_b.is_scalar():
                    continue
                geometric_product = self.pair(position_a, position_b).get(Operation.GEOMETRIC_PRODUCT)
                if geometric_product is None:
                    continue
                parameter_b = operations.multi_vector_parameter(OTHER, class_b)
                node = self._record(self.pair(position_a, position_b), operations.derive_scale(
                    geometric_product, parameter_a, parameter_b,
                ))
                if node is not None:
                    yield node

                magnitude = single.get(Operation.MAGNITUDE)
                if magnitude is not None:
                    node = self._record(single, operations.derive_signum(
                        geometric_product, magnitude, parameter_a,
                    ))
                    if node is not None:
                        yield node

                squared_magnitude = single.get(Operation.SQUARED_MAGNITUDE)
                reversal = single.get(Operation.REVERSAL)
                if squared_magnitude is not None and reversal is not None:
                    node = self._record(single, operations.derive_inverse(
                        geometric_product, squared_magnitude, reversal, parameter_a,
                    ))
                    if node is not None:
                        yield node

    def _composite_operations(self) -> Iterator[OperationDefinition]:
        classes = self.registry.classes
        for position_a, class_a in enumerate(classes):
            parameter_a = operations.multi_vector_parameter(SELF, class_a)
            single = self.single(position_a)
            for position_b, class_b in enumerate(classes):
                parameter_b = operations.multi_vector_parameter(OTHER, class_b)
                table = self.pair(position_a, position_b)
                geometric_product = table.get(Operation.GEOMETRIC_PRODUCT)
                if geometric_product is None:
                    continue

                one = single.get(Operation.ONE)
                inverse = single.get(Operation.INVERSE)
                if class_a == class_b and one is not None and inverse is not None:
                    node = self._record(single, operations.derive_power_of_integer(
                        geometric_product, one, inverse, parameter_a, Parameter("exponent", Integer()),
                    ))
                    if node is not None:
                        yield node

                inverse_b = self.single(position_b).get(Operation.INVERSE)
                if inverse_b is not None:
                    node = self._record(table, operations.derive_division(
                        geometric_product, inverse_b, parameter_a, parameter_b,
                    ))
                    if node is not None:
                        yield node

                node = self._sandwich_product(geometric_product, parameter_a, parameter_b)
                if node is not None and self._record(table, node) is not None:
                    yield node

    def _sandwich_product(self, geometric_product: OperationDefinition,
                          parameter_a: Parameter, parameter_b: Parameter):
        position_a = self.registry.index_of(parameter_a.multi_vector_class())
        position_b = self.registry.index_of(parameter_b.multi_vector_class())
        reversal = self.single(position_a).get(Operation.REVERSAL)
        if reversal is None:
            return None
        geometric_product_2 = self.pair(
            self._position(geometric_product), self._position(reversal),
        ).get(Operation.GEOMETRIC_PRODUCT)
        if geometric_product_2 is None:
            return None
        conversion = None
        if geometric_product_2.result.data_type != parameter_b.data_type:
            conversion = self.pair(self._position(geometric_product_2), position_b).get(Operation.INTO)
            if conversion is None:
                return None
        return operations.derive_sandwich_product(
            geometric_product, geometric_product_2, reversal, conversion, parameter_a, parameter_b,
        )


def synthesize(algebra: GeometricAlgebra, registry: MultiVectorClassRegistry,
               exclude: Iterable[Operation] = ()):
    """Run a :class:`Synthesizer` to completion.

    Returns:
        tuple: ``(synthesizer, nodes)`` with the filled tables and the
            emitted statements in order.
    """
    synthesizer = Synthesizer(algebra, registry, exclude)
    nodes = list(synthesizer.run())
    return synthesizer, nodes
