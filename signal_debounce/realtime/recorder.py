from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Dict, List, Optional

TRACE_FIELDS = ("t_ms", "raw", "confirmed", "elapsed_ms", "edge")


class TraceRecorder:
    def __init__(self, path: Path, flush_every: int = 500):
        self.path = Path(path)
        self.flush_every = max(1, int(flush_every))
        self.rows_written = 0
        self._file: Optional[IO[str]] = self.path.open("w", newline="", encoding="utf-8")
        self._writer = csv.DictWriter(self._file, fieldnames=list(TRACE_FIELDS))
        self._writer.writeheader()
        self._buffer: List[Dict[str, object]] = []

    def record(self, t_ms: float, raw: bool, confirmed: bool, elapsed_ms: float, edge: str) -> None:
        self._buffer.append(
            {
                "t_ms": float(t_ms),
                "raw": int(bool(raw)),
                "confirmed": int(bool(confirmed)),
                "elapsed_ms": round(float(elapsed_ms), 3),
                "edge": str(edge),
            }
        )
        if len(self._buffer) >= self.flush_every:
            self.flush()

    def flush(self) -> None:
        if not self._buffer or self._file is None:
            return
        self._writer.writerows(self._buffer)
        self.rows_written += len(self._buffer)
        self._buffer.clear()
        self._file.flush()

    def close(self) -> None:
        if self._file is None:
            return
        self.flush()
        self._file.close()
        self._file = None
