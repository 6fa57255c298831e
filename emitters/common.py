# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

"""Shared renderer helpers and the multi-target file emitter."""

import os
from typing import Dict, Iterable, Optional, TextIO

from core.algebra import BasisElement
from core.validation import ConfigurationError
from ir.nodes import Expression, MultiVector, Variable
from log import get_logger

logger = get_logger(__name__)

INDENT = "    "


def indentation(level: int) -> str:
    return INDENT * level


def camel_to_snake_case(name: str) -> str:
    """``GeometricProduct`` -> ``geometric_product``.

    Every uppercase letter after the first character starts a new word, so
    ``PGA3`` becomes ``p_g_a3``.
    """
    pieces = []
    for position, character in enumerate(name):
        if character.isupper() and position > 0:
            pieces.append("_")
        pieces.append(character.lower())
    return "".join(pieces)


def element_name(element: BasisElement) -> str:
    """Identifier for one blade lane: ``scalar``, ``e12`` or ``_e13``."""
    assert element.scalar != 0, "zero blades have no lane name"
    if element.index == 0:
        return "scalar"
    prefix = "_e" if element.scalar < 0 else "e"
    return prefix + element.name()[1:]


def format_float(value) -> str:
    return f"{float(value):.1f}"


def source_group_size(inner: Expression, group: int) -> Optional[int]:
    """Lane count of ``group`` when *inner* is a multivector variable."""
    content = inner.content
    if isinstance(content, Variable) and isinstance(content.data_type, MultiVector):
        return len(content.data_type.multi_vector_class.grouped_basis[group])
    return None


def is_splat(indices) -> bool:
    return len(indices) > 1 and len(set(indices)) == 1


class Renderer:
    """Base class of the per-target renderers.

    Subclasses map every IR root to target text; :meth:`render` returns an
    empty string for roots a target does not declare.
    """

    extension = ""

    def render(self, node) -> str:
        raise NotImplementedError


def _renderer_classes():
    from emitters.glsl import GlslRenderer
    from emitters.rust import RustRenderer
    return {"rust": RustRenderer, "glsl": GlslRenderer}


class Emitter:
    """Feeds IR roots to one renderer per target.

    Args:
        path (str): Output path without extension; ``.rs`` / ``.glsl`` are
            appended per target and missing directories are created.
        targets (iterable): Subset of ``("rust", "glsl")``.
    """

    def __init__(self, path: str, targets: Iterable[str] = ("rust", "glsl")):
        renderers = _renderer_classes()
        targets = list(targets)
        unknown = [target for target in targets if target not in renderers]
        if unknown:
            raise ConfigurationError(f"unknown targets {unknown}; available: {sorted(renderers)}")
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.paths: Dict[str, str] = {}
        self.streams: Dict[str, TextIO] = {}
        self.renderers = {}
        self._owns_streams = True
        for target in targets:
            renderer = renderers[target]()
            self.paths[target] = f"{path}.{renderer.extension}"
            self.streams[target] = open(self.paths[target], "w", encoding="utf-8")
            self.renderers[target] = renderer

    @classmethod
    def from_streams(cls, streams: Dict[str, TextIO]) -> "Emitter":
        """Emitter over caller-owned text sinks (e.g. ``io.StringIO``)."""
        renderers = _renderer_classes()
        emitter = cls.__new__(cls)
        emitter.paths = {}
        emitter.streams = dict(streams)
        emitter.renderers = {target: renderers[target]() for target in streams}
        emitter._owns_streams = False
        return emitter

    def emit(self, node) -> None:
        for target, renderer in self.renderers.items():
            self.streams[target].write(renderer.render(node))

    def close(self) -> None:
        if not self._owns_streams:
            return
        for target, stream in self.streams.items():
            stream.close()
            logger.info("Wrote %s", self.paths[target])

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
