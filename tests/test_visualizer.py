"""
Tests for signal plotting.
"""

import os
import pytest
import numpy as np

pytest.importorskip("matplotlib")
import matplotlib
matplotlib.use("Agg")

from virtualizer.render.visualizer import plot_signal, plot_impulse_responses


def test_plot_signal(tmp_path):
    path = str(tmp_path / "ir.png")
    plot_signal(np.array([0.0, 0.5, -0.25, 0.1]), "Left ear", path, size_px=(500, 150))
    assert os.path.getsize(path) > 0


def test_plot_impulse_responses(tmp_path):
    path = str(tmp_path / "pair.png")
    fig = plot_impulse_responses(np.array([0.0, 1.0, 0.5]), np.array([0.0, 0.0, -1.0, 0.25]), path)
    assert len(fig.axes) == 2
    assert os.path.exists(path)
