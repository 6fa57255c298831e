"""Generation tasks for Bladegen.

Each task inherits from :class:`BaseTask` and implements the full lifecycle:
setup_algebra, setup_registry, report, synthesize, open_emitter, visualize.
"""

from .base import BaseTask
from .codegen import CodegenTask

__all__ = [
    "BaseTask",
    "CodegenTask",
]
