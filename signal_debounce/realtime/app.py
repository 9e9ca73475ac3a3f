from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from signal_debounce.realtime.debounce import Debouncer, EdgeMode
from signal_debounce.realtime.recorder import TraceRecorder
from signal_debounce.utils.io_utils import file_sha256, parse_bool, save_json
from signal_debounce.utils.time_utils import ManualClock, utc_now_iso

TRACE_FILENAME = "debounce_trace.csv"


class ReplayApp:
    def __init__(
        self,
        config: Dict[str, Any],
        session_dir: Path,
        input_override: Optional[Union[str, Path]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.session_dir = Path(session_dir)
        self.input_override = input_override
        self.logger = logger or logging.getLogger("signal_debounce")

    def run(self) -> int:
        recorder: Optional[TraceRecorder] = None
        status_code = 0
        start_wall = time.time()

        metadata: Dict[str, Any] = {
            "start_time_utc": utc_now_iso(),
            "start_wall": start_wall,
            "session_dir": str(self.session_dir),
            "config": self.config,
        }
        cfg_used = self.session_dir / "config_used.yaml"
        if cfg_used.exists():
            metadata["config_copy"] = str(cfg_used)
            metadata["config_sha256"] = file_sha256(cfg_used)

        counts = {"samples": 0, "raw_transitions": 0, "confirmed_transitions": 0}
        try:
            debounce_cfg = _section(self.config, "debounce")
            duration_ms = float(debounce_cfg.get("duration_ms", 0.0))
            edge = EdgeMode.parse(debounce_cfg.get("edge", EdgeMode.BOTH.value))
            initial_value = debounce_cfg.get("initial_value")
            metadata["debounce"] = {
                "duration_ms": duration_ms,
                "edge": edge.value,
                "initial_value": initial_value,
            }

            input_path, times_ms, values = self._load_samples()
            metadata["input_csv"] = str(input_path)
            metadata["input_sha256"] = file_sha256(input_path)
            self.logger.info(
                "Replaying %d samples from %s (duration_ms=%s, edge=%s)",
                len(values),
                input_path,
                duration_ms,
                edge.value,
            )

            clock = ManualClock(start_ms=float(times_ms[0]) if len(times_ms) else 0.0)
            debouncer = Debouncer(duration_ms, clock=clock, logger=self.logger)
            if initial_value is not None:
                debouncer.reset(parse_bool(initial_value))

            recorder = TraceRecorder(self.session_dir / TRACE_FILENAME)
            previous_raw: Optional[bool] = None
            previous_confirmed: Optional[bool] = None
            for t_ms, raw in zip(times_ms, values):
                clock.set(t_ms)
                confirmed = debouncer.poll(raw, edge)
                recorder.record(t_ms, raw, confirmed, debouncer.elapsed_ms, edge.value)

                counts["samples"] += 1
                if previous_raw is not None and raw != previous_raw:
                    counts["raw_transitions"] += 1
                if previous_confirmed is not None and confirmed != previous_confirmed:
                    counts["confirmed_transitions"] += 1
                previous_raw = raw
                previous_confirmed = confirmed

            metadata["final_state"] = str(debouncer)
            self.logger.info(
                "Replay done: %d samples, %d raw transitions, %d confirmed transitions",
                counts["samples"],
                counts["raw_transitions"],
                counts["confirmed_transitions"],
            )
        except Exception as exc:
            status_code = 1
            metadata["error"] = {"type": type(exc).__name__, "message": str(exc)}
            self.logger.exception("Replay failed")
        finally:
            if recorder is not None:
                recorder.close()
                metadata["trace_file"] = str(recorder.path)
                metadata["trace_rows"] = recorder.rows_written
            metadata["counts"] = counts
            metadata["end_time_utc"] = utc_now_iso()
            metadata["wall_duration_s"] = time.time() - start_wall
            metadata["status_code"] = status_code
            save_json(metadata, self.session_dir / "metadata.json")

        return status_code

    def _load_samples(self) -> Tuple[Path, np.ndarray, List[bool]]:
        replay_cfg = _section(self.config, "replay")
        raw_path = self.input_override or replay_cfg.get("input_csv")
        if not raw_path:
            raise ValueError("No input samples given (replay.input_csv or --input)")
        input_path = Path(raw_path)
        if not input_path.exists():
            raise FileNotFoundError(f"Missing input samples: {input_path}")

        time_col = str(replay_cfg.get("time_column", "t_ms"))
        value_col = str(replay_cfg.get("value_column", "raw"))
        df = pd.read_csv(input_path)
        missing = [c for c in (time_col, value_col) if c not in df.columns]
        if missing:
            raise ValueError(f"Input {input_path} is missing columns: {missing}")

        times_ms = pd.to_numeric(df[time_col], errors="coerce").to_numpy(dtype=float)
        if not np.all(np.isfinite(times_ms)):
            raise ValueError(f"Column {time_col!r} contains non-numeric timestamps")
        if times_ms.size > 1 and np.any(np.diff(times_ms) < 0):
            raise ValueError(f"Column {time_col!r} must be non-decreasing")

        values = [parse_bool(v) for v in df[value_col].tolist()]
        return input_path, times_ms, values


def _section(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    raw = config.get(name, {})
    return dict(raw) if isinstance(raw, dict) else {}
