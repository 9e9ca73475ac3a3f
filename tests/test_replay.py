import json

import pandas as pd
import pytest

from signal_debounce.analysis.analyze import analyze_session
from signal_debounce.cli import main
from signal_debounce.realtime.app import ReplayApp


def _write_samples(path, rows) -> None:
    pd.DataFrame(rows, columns=["t_ms", "raw"]).to_csv(path, index=False)


def test_replay_writes_trace_and_metadata(tmp_path) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, [(0, 0), (10, 1), (40, 1), (60, 1)])
    config = {"debounce": {"duration_ms": 50, "edge": "both"}, "replay": {"input_csv": str(samples)}}

    status = ReplayApp(config=config, session_dir=tmp_path).run()

    assert status == 0
    trace = pd.read_csv(tmp_path / "debounce_trace.csv")
    assert list(trace["confirmed"]) == [0, 0, 0, 1]
    assert list(trace["elapsed_ms"]) == [0.0, 0.0, 30.0, 50.0]

    metadata = json.loads((tmp_path / "metadata.json").read_text(encoding="utf-8"))
    assert metadata["status_code"] == 0
    assert metadata["counts"] == {"samples": 4, "raw_transitions": 1, "confirmed_transitions": 1}
    assert metadata["debounce"]["edge"] == "both"


def test_replay_rising_edge_with_initial_value(tmp_path) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, [(0, "high"), (5, "low"), (8, "high"), (30, "high")])
    config = {"debounce": {"duration_ms": 20, "edge": "rising", "initial_value": True}}

    status = ReplayApp(config=config, session_dir=tmp_path, input_override=samples).run()

    assert status == 0
    trace = pd.read_csv(tmp_path / "debounce_trace.csv")
    assert list(trace["confirmed"]) == [1, 0, 0, 1]
    assert set(trace["edge"]) == {"rising"}


@pytest.mark.parametrize(
    "rows, debounce_cfg",
    [
        ([(10, 0), (5, 1)], {"duration_ms": 10}),
        ([(0, 0), (5, "maybe")], {"duration_ms": 10}),
        ([(0, 0)], {"duration_ms": -1}),
        ([(0, 0)], {"duration_ms": 10, "edge": "sideways"}),
    ],
)
def test_replay_failures_return_error_status(tmp_path, rows, debounce_cfg) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, rows)
    config = {"debounce": debounce_cfg, "replay": {"input_csv": str(samples)}}

    status = ReplayApp(config=config, session_dir=tmp_path).run()

    assert status == 1
    metadata = json.loads((tmp_path / "metadata.json").read_text(encoding="utf-8"))
    assert metadata["status_code"] == 1
    assert "error" in metadata


def test_replay_missing_input_file(tmp_path) -> None:
    config = {"replay": {"input_csv": str(tmp_path / "nope.csv")}}
    assert ReplayApp(config=config, session_dir=tmp_path).run() == 1
    metadata = json.loads((tmp_path / "metadata.json").read_text(encoding="utf-8"))
    assert metadata["error"]["type"] == "FileNotFoundError"


def test_cli_replay_then_analyze(tmp_path, capsys) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, [(0, 0), (5, 1), (10, 0), (15, 1), (20, 1), (80, 1), (90, 0)])
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "project:\n"
        f"  out_dir: {tmp_path / 'data'}\n"
        "  session_id: cli_run\n"
        "debounce:\n"
        "  duration_ms: 1000\n"
        "analysis:\n"
        "  output_plots: false\n",
        encoding="utf-8",
    )

    main(["replay", "--config", str(config_path), "--input", str(samples), "--duration_ms", "50"])
    session_dir = tmp_path / "data" / "cli_run"
    assert capsys.readouterr().out.strip() == str(session_dir)
    assert (session_dir / "config_used.yaml").exists()
    assert (session_dir / "run.log").exists()

    main(["analyze_session", "--session_dir", str(session_dir), "--no_plots"])
    summary = pd.read_csv(session_dir / "summary.csv")
    assert int(summary.loc[0, "raw_transitions"]) == 4
    assert int(summary.loc[0, "confirmed_transitions"]) == 1
    assert int(summary.loc[0, "suppressed_transitions"]) == 3
    assert not (session_dir / "trace.png").exists()


def test_cli_replay_failure_exits_nonzero(tmp_path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"project:\n  out_dir: {tmp_path}\n  session_id: bad\ndebounce:\n  duration_ms: 10\n",
        encoding="utf-8",
    )
    with pytest.raises(SystemExit) as exc_info:
        main(["replay", "--config", str(config_path)])
    assert exc_info.value.code == 1


def test_analyze_session_requires_trace(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        analyze_session(tmp_path, output_plots_override=False)


def test_analyze_session_writes_plot(tmp_path) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, [(0, 1), (4, 0), (9, 1), (50, 1)])
    config = {"debounce": {"duration_ms": 20}, "replay": {"input_csv": str(samples)}}
    assert ReplayApp(config=config, session_dir=tmp_path).run() == 0

    summary_path = analyze_session(tmp_path)

    assert summary_path == tmp_path / "summary.csv"
    assert (tmp_path / "trace.png").exists()


def test_initial_value_does_not_count_as_a_transition(tmp_path) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, [(0, 0), (5, 0)])
    config = {
        "debounce": {"duration_ms": 20, "edge": "rising", "initial_value": True},
        "replay": {"input_csv": str(samples)},
    }

    assert ReplayApp(config=config, session_dir=tmp_path).run() == 0
    analyze_session(tmp_path, output_plots_override=False)

    metadata = json.loads((tmp_path / "metadata.json").read_text(encoding="utf-8"))
    summary = pd.read_csv(tmp_path / "summary.csv")
    assert metadata["counts"] == {"samples": 2, "raw_transitions": 0, "confirmed_transitions": 0}
    assert metadata["trace_rows"] == 2
    assert int(summary.loc[0, "confirmed_transitions"]) == metadata["counts"]["confirmed_transitions"]
    assert int(summary.loc[0, "raw_transitions"]) == metadata["counts"]["raw_transitions"]


def test_cli_edge_override(tmp_path) -> None:
    samples = tmp_path / "samples.csv"
    _write_samples(samples, [(0, 1), (5, 0), (10, 0)])
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        f"project:\n  out_dir: {tmp_path}\n  session_id: edge_run\ndebounce:\n  duration_ms: 1000\n  edge: both\n",
        encoding="utf-8",
    )

    main(["replay", "--config", str(config_path), "--input", str(samples), "--edge", "rising"])

    session_dir = tmp_path / "edge_run"
    trace = pd.read_csv(session_dir / "debounce_trace.csv")
    assert list(trace["confirmed"]) == [1, 0, 0]
    assert set(trace["edge"]) == {"rising"}
    assert "edge: rising" in (session_dir / "config_used.yaml").read_text(encoding="utf-8")
