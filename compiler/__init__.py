# Bladegen: Geometric Algebra Code Generator (C) 2026 Eunkyum Kim
# Licensed under the Apache License, Version 2.0 | "Unbending" Paradigm

"""Derivation engine: per-operation builders and the phased synthesizer."""

from .synthesis import Synthesizer, synthesize

__all__ = ["Synthesizer", "synthesize"]
