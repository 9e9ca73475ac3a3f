from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_trace(df: pd.DataFrame, out_path: Path) -> None:
    t = pd.to_numeric(df.get("t_ms"), errors="coerce")
    t = (t - float(np.nanmin(t))) / 1000.0 if len(t) else t
    raw = pd.to_numeric(df.get("raw"), errors="coerce").fillna(0)
    confirmed = pd.to_numeric(df.get("confirmed"), errors="coerce").fillna(0)

    fig, ax = plt.subplots(figsize=(9, 3))
    ax.step(t, raw, where="post", lw=1.0, alpha=0.6, color="tab:gray", label="raw")
    ax.step(t, confirmed + 0.05, where="post", lw=1.5, color="tab:blue", label="confirmed")
    ax.set_title("Debounced Signal")
    ax.set_xlabel("Time (s)")
    ax.set_yticks([0, 1])
    ax.set_yticklabels(["low", "high"])
    ax.set_ylim(-0.2, 1.3)
    ax.legend(loc="upper right")
    fig.tight_layout()
    fig.savefig(out_path, dpi=150)
    plt.close(fig)
