from __future__ import annotations

from typing import Any, Dict

import numpy as np
import pandas as pd


def _column(df: pd.DataFrame, name: str) -> np.ndarray:
    if name not in df.columns:
        return np.zeros(len(df), dtype=float)
    return pd.to_numeric(df[name], errors="coerce").fillna(0).to_numpy(dtype=float)


def compute_dt_seconds(df: pd.DataFrame) -> np.ndarray:
    if "t_ms" not in df.columns or df.empty:
        return np.array([], dtype=float)

    t = pd.to_numeric(df["t_ms"], errors="coerce").to_numpy(dtype=float) / 1000.0
    n = len(t)
    dt = np.zeros(n, dtype=float)

    if n <= 1:
        return dt

    diffs = np.diff(t)
    diffs = np.where(np.isfinite(diffs), diffs, np.nan)
    diffs = np.where(diffs >= 0, diffs, 0.0)

    dt[:-1] = np.nan_to_num(diffs, nan=0.0, posinf=0.0, neginf=0.0)

    positive = dt[:-1][dt[:-1] > 0]
    dt[-1] = float(np.median(positive)) if positive.size else 0.0
    return dt


def _change_indices(values: np.ndarray) -> np.ndarray:
    if values.size < 2:
        return np.array([], dtype=int)
    return np.flatnonzero(values[1:] != values[:-1]) + 1


def compute_confirm_latencies_ms(df: pd.DataFrame) -> np.ndarray:
    # Latency runs from the last raw change at or before each confirmed change.
    if df.empty or "t_ms" not in df.columns:
        return np.array([], dtype=float)

    t = pd.to_numeric(df["t_ms"], errors="coerce").to_numpy(dtype=float)
    raw_changes = _change_indices(_column(df, "raw") > 0.5)
    confirmed_changes = _change_indices(_column(df, "confirmed") > 0.5)

    latencies = []
    for idx in confirmed_changes:
        pos = int(np.searchsorted(raw_changes, idx, side="right")) - 1
        if pos < 0:
            continue
        latencies.append(t[idx] - t[raw_changes[pos]])
    return np.asarray(latencies, dtype=float)


def compute_summary(df: pd.DataFrame) -> Dict[str, Any]:
    if df.empty:
        return {
            "n_samples": 0,
            "session_duration_s": 0.0,
            "raw_transitions": 0,
            "confirmed_transitions": 0,
            "suppressed_transitions": 0,
            "raw_high_time_s": 0.0,
            "confirmed_high_time_s": 0.0,
            "mean_confirm_latency_ms": np.nan,
            "max_confirm_latency_ms": np.nan,
        }

    dt = compute_dt_seconds(df)
    raw = _column(df, "raw") > 0.5
    confirmed = _column(df, "confirmed") > 0.5

    raw_transitions = int(_change_indices(raw).size)
    confirmed_transitions = int(_change_indices(confirmed).size)
    latencies = compute_confirm_latencies_ms(df)

    return {
        "n_samples": int(len(df)),
        "session_duration_s": float(np.nansum(dt)),
        "raw_transitions": raw_transitions,
        "confirmed_transitions": confirmed_transitions,
        "suppressed_transitions": max(0, raw_transitions - confirmed_transitions),
        "raw_high_time_s": float(dt[raw].sum()),
        "confirmed_high_time_s": float(dt[confirmed].sum()),
        "mean_confirm_latency_ms": float(np.mean(latencies)) if latencies.size else np.nan,
        "max_confirm_latency_ms": float(np.max(latencies)) if latencies.size else np.nan,
    }
