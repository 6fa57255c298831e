# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""Target renderers (Rust, GLSL) and the file emitter."""

from .common import Emitter, camel_to_snake_case, element_name
from .rust import RustRenderer
from .glsl import GlslRenderer

__all__ = ["Emitter", "RustRenderer", "GlslRenderer", "camel_to_snake_case", "element_name"]
