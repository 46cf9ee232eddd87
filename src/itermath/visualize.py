"""Convergence history plots.

A `ConvergenceRecorder` is an iteration observer that keeps the error of
every step. `plot_convergence` draws one or more recorded histories on a
semilog axis, with the tolerance as a horizontal reference line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from .controllers import IterationState, StepEvent


@dataclass
class ConvergenceRecorder:
    """Observer collecting (step, error) pairs of the most recent run.

    Optionally halts a run once `max_steps` steps have been recorded.
    """

    max_steps: Optional[int] = None
    steps: List[int] = field(default_factory=list)
    errors: List[float] = field(default_factory=list)
    runs: int = 0
    finished: int = 0

    def on_start(self, state: IterationState) -> None:
        self.steps.clear()
        self.errors.clear()
        self.runs += 1

    def on_step(self, event: StepEvent) -> None:
        self.steps.append(event.step)
        self.errors.append(event.error)
        if self.max_steps is not None and event.step >= self.max_steps:
            event.halt = True

    def on_finish(self, state: IterationState) -> None:
        self.finished += 1

    def history(self) -> Tuple[np.ndarray, np.ndarray]:
        return np.asarray(self.steps, dtype=int), np.asarray(self.errors, dtype=float)


@dataclass(frozen=True)
class PlotConfig:
    figsize: Tuple[float, float] = (7.0, 4.5)
    dpi: int = 150
    marker: str = "o"
    line_width: float = 1.2
    # Errors of exactly zero cannot be drawn on a log axis; clip them here.
    floor: float = 1e-18


def plot_convergence(
    histories: Dict[str, Tuple[np.ndarray, np.ndarray]],
    *,
    tolerance: float | None = None,
    out: Path | str | None = None,
    title: str = "Convergence",
    config: PlotConfig = PlotConfig(),
):
    """Plot error against iteration for each named history.

    Args:
        histories: Mapping of label -> (steps, errors), e.g. from
            `ConvergenceRecorder.history()`.
        tolerance: Draw the stopping tolerance as a dashed line.
        out: Save the figure here (headless) instead of returning it open.
        title: Axes title.
        config: Figure styling.

    Returns:
        The matplotlib Figure.
    """
    import matplotlib

    if out is not None and matplotlib.get_backend().lower() != "agg":
        matplotlib.use("Agg", force=True)

    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=config.figsize, constrained_layout=True)

    for label, (steps, errors) in histories.items():
        steps = np.asarray(steps, dtype=float)
        errors = np.maximum(np.asarray(errors, dtype=float), config.floor)
        if steps.shape != errors.shape:
            raise ValueError(f"history '{label}': steps {steps.shape} and errors {errors.shape} differ")
        ax.semilogy(steps, errors, marker=config.marker, linewidth=config.line_width, label=label)

    if tolerance is not None and tolerance > 0.0:
        ax.axhline(tolerance, color="k", linestyle="--", linewidth=0.8, label="tolerance")

    ax.set_xlabel("iteration")
    ax.set_ylabel("error")
    ax.set_title(title)
    ax.grid(True, which="both", ls=":")
    ax.legend()

    if out is not None:
        out = Path(out)
        out.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out, dpi=config.dpi)
        plt.close(fig)

    return fig
