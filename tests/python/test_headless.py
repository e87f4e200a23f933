import csv
import json

import pytest

from particlelife.app.headless import _HEADER, _summary_stats, run_headless


def _write_config(tmp_path, particle_count=30):
    path = tmp_path / "small.yaml"
    path.write_text(
        f"particle_count: {particle_count}\n"
        "seed_margin: 20\n"
        "arena:\n  width: 400\n  height: 300\n"
    )
    return path


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def test_headless_log_header_and_rows(tmp_path):
    log_path = tmp_path / "run.csv"
    run_headless(steps=3, seed=1, log_path=log_path, deterministic_log=True, config_path=_write_config(tmp_path))

    rows = _read_csv(log_path)

    assert len(rows) == 4
    assert rows[0] == _HEADER
    idx = {name: i for i, name in enumerate(rows[0])}
    assert [int(row[idx["tick"]]) for row in rows[1:]] == [0, 1, 2]
    assert all(row[idx["tick_ms"]] == "0.000" for row in rows[1:])
    assert int(rows[1][idx["population"]]) <= 30


def test_deterministic_logs_match_for_the_same_seed(tmp_path):
    config_path = _write_config(tmp_path)
    first = tmp_path / "first.csv"
    second = tmp_path / "second.csv"

    run_headless(steps=5, seed=9, log_path=first, deterministic_log=True, config_path=config_path)
    run_headless(steps=5, seed=9, log_path=second, deterministic_log=True, config_path=config_path)

    assert first.read_text() == second.read_text()


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    world = run_headless(
        steps=4,
        seed=3,
        deterministic_log=True,
        config_path=_write_config(tmp_path),
        summary_path=summary_path,
        summary_window=2,
    )

    payload = json.loads(summary_path.read_text())

    assert payload["steps"] == 4
    assert payload["seed"] == 3
    assert payload["final_population"] == len(world.particles)
    assert payload["escaped_total"] >= 0
    assert payload["tick_ms"]["max"] == 0.0
    assert "population" in payload
    assert "neighbor_checks" in payload
    assert payload["tail_window"]["window"] == 2


def test_summary_stats_interpolates_percentiles():
    stats = _summary_stats([4.0, 1.0, 3.0, 2.0, 5.0])

    assert stats["min"] == 1.0
    assert stats["max"] == 5.0
    assert stats["avg"] == 3.0
    assert stats["p50"] == 3.0
    assert stats["p90"] == pytest.approx(4.6)
    assert _summary_stats([])["p99"] == 0.0
