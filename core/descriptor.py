# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Algebra descriptors.

A descriptor names the algebra, lists its generator squares and declares the
multivector classes, e.g.::

    PGA3:0,1,1,1;Motor:1,e34,e42,e23|e1,e12,e13,e14;Point:e234,e143,e124,e132

Classes are separated by ``;``, groups within a class by ``|`` and blades
within a group by ``,``.
"""

from dataclasses import dataclass
from typing import List

from core.algebra import BasisElement, GeometricAlgebra
from core.registry import MultiVectorClass, MultiVectorClassRegistry
from core.validation import ConfigurationError, check_generator_squares, check_name
from log import get_logger

logger = get_logger(__name__)

MAX_GROUP_SIZE = 4


@dataclass
class Configuration:
    """Everything a descriptor defines.

    Attributes:
        algebra_name (str): Name used for output files.
        algebra (GeometricAlgebra): The algebra itself.
        registry (MultiVectorClassRegistry): Declared classes, in order.
    """

    algebra_name: str
    algebra: GeometricAlgebra
    registry: MultiVectorClassRegistry


def _split_named(text: str, what: str):
    name, separator, body = text.partition(":")
    if not separator:
        raise ConfigurationError(f"{what} {text.strip()!r} is missing ':'")
    return check_name(name, f"{what} name"), body


def _parse_squares(body: str) -> List[int]:
    squares = []
    for item in body.split(","):
        try:
            squares.append(int(item))
        except ValueError:
            raise ConfigurationError(f"generator square {item.strip()!r} is not an integer") from None
    return squares


def parse_descriptor(descriptor: str) -> Configuration:
    """Parse ``<algebra>:<squares>;<class>:<blades>;...`` into a configuration.

    Raises:
        ConfigurationError: On any malformed part of the descriptor.
    """
    if not descriptor or not descriptor.strip():
        raise ConfigurationError("empty algebra descriptor")
    algebra_part, *class_parts = descriptor.split(";")
    algebra_name, squares = _split_named(algebra_part, "algebra")
    squares = _parse_squares(squares)
    check_generator_squares(squares, algebra_name)
    algebra = GeometricAlgebra(squares)

    registry = MultiVectorClassRegistry()
    for class_part in class_parts:
        if not class_part.strip():
            continue
        class_name, body = _split_named(class_part, "class")
        grouped_basis = [
            [algebra.parse_blade(blade.strip()) for blade in group.split(",")]
            for group in body.split("|")
        ]
        registry.register(MultiVectorClass(class_name, grouped_basis))
    return Configuration(algebra_name, algebra, registry)


def product_signature(algebra: GeometricAlgebra, class_a: MultiVectorClass,
                      class_b: MultiVectorClass) -> tuple:
    """Blade indices reached by the geometric product of two classes."""
    return tuple(sorted({
        a.index ^ b.index
        for a in class_a.flat_basis()
        for b in class_b.flat_basis()
        if algebra.product(a, b).scalar != 0
    }))


def canonical_class(algebra: GeometricAlgebra, name: str, signature,
                    max_group_size: int = MAX_GROUP_SIZE) -> MultiVectorClass:
    """Class over *signature* in canonical blade order, grouped by *max_group_size*."""
    wanted = set(signature)
    blades = [element for element in algebra.sorted_basis() if element.index in wanted]
    groups = [blades[i:i + max_group_size] for i in range(0, len(blades), max_group_size)]
    return MultiVectorClass(name, groups)


def _unique_name(registry: MultiVectorClassRegistry, name: str) -> str:
    taken = {multi_vector_class.class_name for multi_vector_class in registry}
    if name not in taken:
        return name
    suffix = 2
    while f"{name}{suffix}" in taken:
        suffix += 1
    return f"{name}{suffix}"


def complete_registry(registry: MultiVectorClassRegistry, algebra: GeometricAlgebra,
                      max_group_size: int = MAX_GROUP_SIZE) -> List[MultiVectorClass]:
    """Add the classes derivations need but descriptors tend to omit.

    Appends a ``Scalar`` class when none is declared, then closes the
    registry under the geometric product. Returns the added classes.
    """
    added = []
    if registry.scalar_class() is None:
        scalar = MultiVectorClass(_unique_name(registry, "Scalar"), [[BasisElement(1, 0)]])
        registry.register(scalar)
        added.append(scalar)

    changed = True
    while changed:
        changed = False
        for class_a in list(registry.classes):
            for class_b in list(registry.classes):
                signature = product_signature(algebra, class_a, class_b)
                if not signature or registry.get(signature) is not None:
                    continue
                name = _unique_name(registry, f"{class_a.class_name}{class_b.class_name}Product")
                product_class = canonical_class(algebra, name, signature, max_group_size)
                registry.register(product_class)
                added.append(product_class)
                changed = True

    for multi_vector_class in added:
        logger.info("Completed registry with %s", multi_vector_class)
    return added


def load_configuration(descriptor: str, complete: bool = True) -> Configuration:
    """Parse a descriptor and optionally complete its registry."""
    configuration = parse_descriptor(descriptor)
    logger.info("Algebra %s %r with %d declared classes", configuration.algebra_name,
                configuration.algebra, len(configuration.registry))
    if complete:
        complete_registry(configuration.registry, configuration.algebra)
    return configuration
