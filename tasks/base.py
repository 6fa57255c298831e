# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
#
# This project is fully open-source, including for commercial use.
# We believe Geometric Algebra is the future of AI, and we want
# the industry to build upon this "unbending" paradigm.

from abc import ABC, abstractmethod
from collections import Counter
from tqdm import tqdm
from omegaconf import DictConfig
from log import get_logger, set_level

logger = get_logger(__name__)

class BaseTask(ABC):
    """Abstract base class for all generation tasks.

    Lifecycle: setup_algebra → setup_registry → report → synthesize → emit → visualize.

    Attributes:
        cfg (DictConfig): Hydra configuration.
        algebra (GeometricAlgebra): Algebra the code is generated for.
        registry (MultiVectorClassRegistry): Classes to generate.
    """

    def __init__(self, cfg: DictConfig):
        """Sets up the task.

        Args:
            cfg (DictConfig): Hydra config.
        """
        self.cfg = cfg
        if cfg.get('log_level'):
            set_level(cfg.log_level)

        self.algebra = self.setup_algebra()
        self.registry = self.setup_registry()

    @abstractmethod
    def setup_algebra(self):
        """Initialize the geometric algebra."""
        pass

    @abstractmethod
    def setup_registry(self):
        """Collect the multivector classes."""
        pass

    @abstractmethod
    def report(self):
        """Log or write diagnostics about the algebra before generation."""
        pass

    @abstractmethod
    def synthesize(self):
        """Return an iterator over the IR nodes to emit."""
        pass

    @abstractmethod
    def open_emitter(self):
        """Return a context-managed sink accepting IR nodes."""
        pass

    @abstractmethod
    def visualize(self):
        """Generate visualizations of the algebra."""
        pass

    def run(self):
        """Execute the full generation pass.

        Returns:
            Counter: Emitted nodes per node type / operation.
        """
        logger.info("Starting Task: %s", self.cfg.name)
        self.report()

        counts = Counter()
        with self.open_emitter() as emitter:
            pbar = tqdm(self.synthesize(), unit="node", disable=not self.cfg.get('progress', True))
            for node in pbar:
                emitter.emit(node)
                operation = getattr(node, 'operation', None)
                key = operation.value if operation is not None else type(node).__name__
                counts[key] += 1
                pbar.set_description(key)

        logger.info("Generation Complete. %d nodes emitted.", sum(counts.values()))
        self.visualize()
        return counts
