"""
Signal Plotting

Plots impulse responses and rendered channels with matplotlib. Requires the
'demo' extra.
"""

import numpy as np
from typing import Optional, Tuple


def plot_signal(values: np.ndarray, title: str, output_path: Optional[str] = None,
                y_range: Tuple[float, float] = (-0.75, 0.75),
                size_px: Tuple[int, int] = (5000, 1500), dpi: int = 100):
    """
    Plot a signal as a red line against its sample index.

    Args:
        values: Samples to plot
        title: Figure caption
        output_path: PNG path to save to; the figure is returned either way
        y_range: Vertical axis limits
        size_px: Figure size in pixels
        dpi: Resolution used to convert size_px to inches

    Returns:
        The matplotlib Figure
    """
    import matplotlib.pyplot as plt

    values = np.asarray(values)
    fig, ax = plt.subplots(figsize=(size_px[0] / dpi, size_px[1] / dpi), dpi=dpi)
    ax.plot(np.arange(len(values)), values, color='red')
    ax.set_xlim(0, max(len(values), 1))
    ax.set_ylim(*y_range)
    ax.set_title(title)
    ax.grid(True)

    if output_path is not None:
        fig.savefig(output_path)
        plt.close(fig)

    return fig


def plot_impulse_responses(left: np.ndarray, right: np.ndarray, output_path: Optional[str] = None):
    """
    Plot a left/right impulse response pair on two stacked axes.

    Returns:
        The matplotlib Figure
    """
    import matplotlib.pyplot as plt

    fig, (ax_left, ax_right) = plt.subplots(2, 1, figsize=(12, 6), sharex=True)
    ax_left.plot(left, color='tab:blue')
    ax_left.set_title('Left ear')
    ax_right.plot(right, color='tab:red')
    ax_right.set_title('Right ear')
    ax_right.set_xlabel('Sample')

    for ax in (ax_left, ax_right):
        ax.grid(True)

    fig.tight_layout()
    if output_path is not None:
        fig.savefig(output_path)
        plt.close(fig)

    return fig
