# Bladegen: Geometric Algebra Code Generator
# Copyright (C) 2026 Eunkyum Kim <nemonanconcode@gmail.com>
#
# Tests for the code generation task and the Hydra configuration.

import pytest
from hydra import compose, initialize
from omegaconf import OmegaConf

from core.validation import ConfigurationError
from main import TASK_MAP
from tasks import CodegenTask


def _make_cfg(output_dir, **overrides):
    cfg = {
        "name": "codegen",
        "descriptor": "G3:1,1,1;Rotor:1,e12,e13,e23;Vector:e1,e2,e3",
        "output_dir": str(output_dir),
        "targets": ["rust", "glsl"],
        "complete_classes": True,
        "max_group_size": 4,
        "exclude": [],
        "cayley_table": True,
        "plot_cayley": False,
        "progress": False,
        "log_level": "WARNING",
    }
    cfg.update(overrides)
    return OmegaConf.create(cfg)


# ---------------------------------------------------------------------------
# CodegenTask
# ---------------------------------------------------------------------------

class TestCodegenTask:
    def test_run_writes_sources(self, tmp_path):
        task = CodegenTask(_make_cfg(tmp_path))
        counts = task.run()
        assert (tmp_path / "G3.rs").exists()
        assert (tmp_path / "G3.glsl").exists()
        assert counts["Preamble"] == 1
        assert counts["ClassDefinition"] == 4
        assert counts["GeometricProduct"] > 0
        assert counts["Transformation"] > 0

    def test_cayley_table_file(self, tmp_path):
        CodegenTask(_make_cfg(tmp_path)).run()
        table = (tmp_path / "G3.cayley.txt").read_text().splitlines()
        assert len(table) == 8
        assert table[0].split()[5] == "-e13"

    def test_cayley_table_can_be_skipped(self, tmp_path):
        CodegenTask(_make_cfg(tmp_path, cayley_table=False)).run()
        assert not (tmp_path / "G3.cayley.txt").exists()

    def test_registry_completion_switch(self, tmp_path):
        completed = CodegenTask(_make_cfg(tmp_path))
        plain = CodegenTask(_make_cfg(tmp_path, complete_classes=False))
        assert [c.class_name for c in completed.registry] == [
            "Rotor", "Vector", "Scalar", "RotorVectorProduct",
        ]
        assert [c.class_name for c in plain.registry] == ["Rotor", "Vector"]

    def test_exclude(self, tmp_path):
        counts = CodegenTask(_make_cfg(tmp_path, exclude=["Reversal"])).run()
        assert "Reversal" not in counts
        assert "Inverse" not in counts
        assert counts["GeometricProduct"] > 0

    def test_unknown_exclude_name(self, tmp_path):
        task = CodegenTask(_make_cfg(tmp_path, exclude=["Sandwich"]))
        with pytest.raises(ConfigurationError):
            task.run()

    def test_single_target(self, tmp_path):
        CodegenTask(_make_cfg(tmp_path, targets=["glsl"])).run()
        assert (tmp_path / "G3.glsl").exists()
        assert not (tmp_path / "G3.rs").exists()

    def test_malformed_descriptor(self, tmp_path):
        with pytest.raises(ConfigurationError):
            CodegenTask(_make_cfg(tmp_path, descriptor="G3:1,1,1;Vector:e7"))

    def test_plot_cayley(self, tmp_path):
        CodegenTask(_make_cfg(tmp_path, plot_cayley=True, targets=["rust"])).run()
        assert (tmp_path / "G3.cayley.png").stat().st_size > 0


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_default_config_composes():
    with initialize(version_base=None, config_path="../conf"):
        cfg = compose(config_name="config", overrides=["output_dir=elsewhere"])
    assert cfg.name in TASK_MAP
    assert cfg.output_dir == "elsewhere"
    assert list(cfg.targets) == ["rust", "glsl"]
    assert cfg.descriptor.startswith("G3:")


def test_default_config_runs(tmp_path):
    with initialize(version_base=None, config_path="../conf"):
        cfg = compose(config_name="config", overrides=[
            f"output_dir='{tmp_path}'", "progress=false", "cayley_table=false",
        ])
    counts = TASK_MAP[cfg.name](cfg).run()
    assert counts["ClassDefinition"] == 4
    assert (tmp_path / "G3.rs").exists()


# ---------------------------------------------------------------------------
# Cayley visualizer
# ---------------------------------------------------------------------------

def test_visualizer_matrices():
    from core.algebra import GeometricAlgebra
    from core.visualizer import CayleyVisualizer

    viz = CayleyVisualizer(GeometricAlgebra([0, 1, 1]))
    signs = viz.signed_matrix()
    grades = viz.grade_matrix()
    assert signs.shape == grades.shape == (8, 8)
    # e1 squares to zero
    assert signs[1, 1] == 0
    assert grades[1, 2] == 2
    assert viz.basis_names[:4] == ["1", "e1", "e2", "e3"]
