# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Multivector classes and their registry."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from core.algebra import BasisElement


@dataclass(frozen=True)
class MultiVectorClass:
    """A named subspace of the algebra (scalar, vector, rotor, ...).

    Attributes:
        class_name (str): Name used for the generated type.
        grouped_basis (tuple): Groups of blades; each group becomes one SIMD
            lane vector. Grouping has no algebraic meaning.
    """

    class_name: str
    grouped_basis: Tuple[Tuple[BasisElement, ...], ...]

    def __post_init__(self):
        # Accept lists from callers, store tuples so the class stays hashable.
        object.__setattr__(
            self, "grouped_basis", tuple(tuple(group) for group in self.grouped_basis)
        )

    def flat_basis(self) -> List[BasisElement]:
        return [element for group in self.grouped_basis for element in group]

    def signature(self) -> Tuple[int, ...]:
        """Sorted blade indices; the structural identity of the class."""
        return tuple(sorted(element.index for element in self.flat_basis()))

    def is_scalar(self) -> bool:
        return self.signature() == (0,)

    def index_in_group(self, flat_index: int) -> Tuple[int, int]:
        """Map a position in :meth:`flat_basis` to ``(group, lane)``."""
        for group_index, group in enumerate(self.grouped_basis):
            if flat_index < len(group):
                return group_index, flat_index
            flat_index -= len(group)
        raise IndexError("flat index out of range for this class")

    def __str__(self):
        groups = "|".join(",".join(str(e) for e in group) for group in self.grouped_basis)
        return f"{self.class_name}:{groups}"


class MultiVectorClassRegistry:
    """Append-only class store indexed by signature.

    Registering a second class with an existing signature keeps both in
    :attr:`classes` but the lookup index points at the newest one.
    """

    def __init__(self, classes: Iterable[MultiVectorClass] = ()):
        self.classes: List[MultiVectorClass] = []
        self._index_by_signature: Dict[Tuple[int, ...], int] = {}
        for multi_vector_class in classes:
            self.register(multi_vector_class)

    def register(self, multi_vector_class: MultiVectorClass) -> None:
        self._index_by_signature[multi_vector_class.signature()] = len(self.classes)
        self.classes.append(multi_vector_class)

    def get(self, signature: Iterable[int]) -> Optional[MultiVectorClass]:
        index = self._index_by_signature.get(tuple(signature))
        if index is None:
            return None
        return self.classes[index]

    def index_of(self, multi_vector_class: MultiVectorClass) -> int:
        """Registry position of *multi_vector_class* (by identity)."""
        for position, candidate in enumerate(self.classes):
            if candidate is multi_vector_class:
                return position
        raise KeyError(f"{multi_vector_class.class_name} is not registered")

    def scalar_class(self) -> Optional[MultiVectorClass]:
        return self.get((0,))

    def __len__(self):
        return len(self.classes)

    def __iter__(self):
        return iter(self.classes)
