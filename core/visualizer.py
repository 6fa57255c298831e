import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import seaborn as sns

from core.algebra import GeometricAlgebra
from log import get_logger

logger = get_logger(__name__)


class CayleyVisualizer:
    """Heatmaps of an algebra's multiplication table."""

    def __init__(self, algebra: GeometricAlgebra):
        self.algebra = algebra
        self.basis = algebra.sorted_basis()
        self.basis_names = [element.name() for element in self.basis]

        # Configure plotting style
        sns.set_theme(style="white")

    def signed_matrix(self) -> np.ndarray:
        """Product signs in canonical order (+1, -1 or 0 for null squares)."""
        return np.array(
            [[np.sign(cell.scalar) for cell in row] for row in self.algebra.cayley_matrix()],
            dtype=np.int64,
        )

    def grade_matrix(self) -> np.ndarray:
        """Grade of every product blade in canonical order."""
        return np.array(
            [[cell.grade() for cell in row] for row in self.algebra.cayley_matrix()],
            dtype=np.int64,
        )

    def plot_cayley(self, title=None):
        """
        Signed Cayley table: colour is the sign, annotation the product blade.
        """
        matrix = self.algebra.cayley_matrix()
        labels = np.array([[str(cell) for cell in row] for row in matrix])
        size = max(6, 0.6 * len(self.basis))

        plt.figure(figsize=(size, size))
        sns.heatmap(
            self.signed_matrix(),
            annot=labels if len(self.basis) <= 32 else False,
            fmt="",
            cmap="vlag",
            vmin=-1,
            vmax=1,
            xticklabels=self.basis_names,
            yticklabels=self.basis_names,
            cbar_kws={'label': 'Sign'},
            square=True,
        )
        plt.title(title or f"Cayley table {list(self.algebra.generator_squares)}")
        return plt.gcf()

    def save(self, filename: str):
        plt.savefig(filename, dpi=150, bbox_inches='tight')
        logger.info("Saved figure: %s", filename)
        plt.close()
