"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Tuple


class PlotAdapter:
    """Collect the cost per iteration and optionally emit a matplotlib figure.

    Records without a ``cost`` fall back to ``step_norm``. Each training
    phase (for example one per pretrained layer) is drawn as its own line.
    """

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.phase = "train"
        self._history: Dict[str, List[Tuple[int, float]]] = {}
        self._ylabel = "Cost"
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_step(self, step: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        if "cost" in metrics:
            value = float(metrics["cost"])
        else:
            value = float(metrics.get("step_norm", 0.0))
            self._ylabel = "Step norm"
        self._history.setdefault(self.phase, []).append((int(step), value))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        for phase, points in self._history.items():
            steps, values = zip(*points)
            ax.plot(steps, values, label=phase)
        ax.set_xlabel("Iteration")
        ax.set_ylabel(self._ylabel)
        ax.set_title("Training Curve")
        if len(self._history) > 1:
            ax.legend()
        plot_path = self.run_dir / "cost.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_step


__all__ = ["PlotAdapter"]
