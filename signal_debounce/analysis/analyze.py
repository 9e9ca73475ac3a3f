from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from signal_debounce.analysis.metrics import compute_summary
from signal_debounce.analysis.plots import plot_trace
from signal_debounce.utils.io_utils import load_yaml


def analyze_session(
    session_dir: Path,
    output_plots_override: Optional[bool] = None,
    logger: Optional[logging.Logger] = None,
) -> Path:
    logger = logger or logging.getLogger("signal_debounce")
    session_dir = Path(session_dir)

    trace_path = session_dir / "debounce_trace.csv"
    if not trace_path.exists():
        raise FileNotFoundError(f"Missing debounce trace: {trace_path}")

    config = {}
    config_path = session_dir / "config_used.yaml"
    if config_path.exists():
        config = load_yaml(config_path)

    analysis_cfg = config.get("analysis", {}) if isinstance(config, dict) else {}
    output_plots = (
        output_plots_override
        if output_plots_override is not None
        else bool(analysis_cfg.get("output_plots", True))
    )

    df = pd.read_csv(trace_path)
    summary = compute_summary(df)

    summary_path = session_dir / "summary.csv"
    pd.DataFrame([summary]).to_csv(summary_path, index=False)
    logger.info(
        "Summary written: %s (%d of %d raw transitions suppressed)",
        summary_path,
        summary["suppressed_transitions"],
        summary["raw_transitions"],
    )

    if output_plots:
        try:
            plot_trace(df, out_path=session_dir / "trace.png")
            logger.info("Plot written under %s", session_dir)
        except Exception:
            logger.exception("Failed to generate plot")

    return summary_path
