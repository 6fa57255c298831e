# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

import os

from compiler.synthesis import Synthesizer
from core.descriptor import MAX_GROUP_SIZE, complete_registry, parse_descriptor
from core.validation import ConfigurationError
from emitters.common import Emitter
from ir.nodes import Operation
from log import get_logger, log_block
from tasks.base import BaseTask

logger = get_logger(__name__)


class CodegenTask(BaseTask):
    """Generates Rust and GLSL sources for one algebra descriptor.

    Config keys: ``descriptor``, ``output_dir``, ``targets``,
    ``complete_classes``, ``max_group_size``, ``exclude``, ``cayley_table``,
    ``plot_cayley``.
    """

    def setup_algebra(self):
        self.configuration = parse_descriptor(self.cfg.descriptor)
        logger.info("Algebra %s: %r", self.configuration.algebra_name, self.configuration.algebra)
        return self.configuration.algebra

    def setup_registry(self):
        registry = self.configuration.registry
        if self.cfg.get('complete_classes', True):
            complete_registry(registry, self.algebra, self.cfg.get('max_group_size', MAX_GROUP_SIZE))
        for multi_vector_class in registry:
            logger.info("Class %s", multi_vector_class)
        return registry

    def _output_path(self, suffix=""):
        return os.path.join(self.cfg.output_dir, self.configuration.algebra_name + suffix)

    def _excluded_operations(self):
        excluded = []
        for name in self.cfg.get('exclude', None) or []:
            try:
                excluded.append(Operation(name))
            except ValueError:
                raise ConfigurationError(
                    f"unknown operation {name!r} in exclude; available: {[op.value for op in Operation]}"
                ) from None
        return excluded

    def report(self):
        table = self.algebra.cayley_table()
        log_block(logger, f"Cayley table of {self.configuration.algebra_name}", table)
        if self.cfg.get('cayley_table', True):
            os.makedirs(self.cfg.output_dir, exist_ok=True)
            path = self._output_path(".cayley.txt")
            with open(path, "w", encoding="utf-8") as handle:
                handle.write(table + "\n")
            logger.info("Wrote %s", path)

    def synthesize(self):
        self.synthesizer = Synthesizer(self.algebra, self.registry, self._excluded_operations())
        return self.synthesizer.run()

    def open_emitter(self):
        return Emitter(self._output_path(), list(self.cfg.get('targets', ['rust', 'glsl'])))

    def visualize(self):
        if not self.cfg.get('plot_cayley', False):
            return
        from core.visualizer import CayleyVisualizer
        viz = CayleyVisualizer(self.algebra)
        viz.plot_cayley(title=f"{self.configuration.algebra_name} Cayley table")
        viz.save(self._output_path(".cayley.png"))
