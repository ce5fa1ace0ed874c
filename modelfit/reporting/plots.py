"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Tuple


class PlotAdapter:
    """Collect per-epoch errors and optionally emit a matplotlib figure."""

    def __init__(
        self,
        run_dir: str | Path,
        enable_plots: bool = False,
        *,
        keys: Tuple[str, ...] = ("error", "val_error"),
    ):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self.keys = keys
        self._history: Dict[str, List[Tuple[int, float]]] = {}
        self.plot_path: Path | None = None
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        for key in self.keys:
            if key in metrics:
                self._history.setdefault(key, []).append((epoch, float(metrics[key])))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        fig, ax = plt.subplots()
        for key, points in self._history.items():
            epochs, values = zip(*points)
            ax.plot(epochs, values, label=key)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Error")
        ax.set_title("Training Curve")
        ax.legend()
        self.plot_path = self.run_dir / "error.png"
        fig.savefig(self.plot_path)
        plt.close(fig)
        return self.plot_path

    __call__ = on_epoch


__all__ = ["PlotAdapter"]
