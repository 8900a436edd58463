"""End-to-end tests of the command line entry point."""

from __future__ import annotations

from pathlib import Path

from order_scheduler.main import main


def test_main_writes_both_reports(orders_csv, tmp_path: Path) -> None:
    summary = tmp_path / "summary.csv"
    timetable = tmp_path / "timetable.csv"
    code = main([str(orders_csv), str(summary), str(timetable)])
    assert code == 0

    summary_lines = summary.read_text(encoding="utf-8").splitlines()
    assert len(summary_lines) == 1 + 5
    # input order is preserved
    assert [line.split(",")[0] for line in summary_lines[1:]] == [
        "MEGR-001",
        "MEGR-002",
        "MEGR-003",
        "MEGR-004",
        "MEGR-005",
    ]
    timetable_lines = timetable.read_text(encoding="utf-8").splitlines()
    assert timetable_lines[0] == "Date,Machine,Start,End,Order"
    assert len(timetable_lines) > 1


def test_main_fails_without_outputs(tmp_path: Path) -> None:
    bad = tmp_path / "orders.csv"
    bad.write_text("header\nA,XYZ,1,07.21 10:00,10,5\n", encoding="utf-8")
    summary = tmp_path / "summary.csv"
    timetable = tmp_path / "timetable.csv"
    code = main([str(bad), str(summary), str(timetable)])
    assert code == 1
    assert not summary.exists()
    assert not timetable.exists()


def test_main_chart_failure_removes_reports(orders_csv, tmp_path: Path) -> None:
    # charts directory cannot be created over a regular file
    blocker = tmp_path / "charts"
    blocker.write_text("", encoding="utf-8")
    config = tmp_path / "config.yaml"
    config.write_text(
        f"charts:\n  enabled: true\n  dir: {blocker.as_posix()}\n", encoding="utf-8"
    )
    summary = tmp_path / "summary.csv"
    timetable = tmp_path / "timetable.csv"
    code = main([str(orders_csv), str(summary), str(timetable), "--config", str(config)])
    assert code == 1
    assert not summary.exists()
    assert not timetable.exists()


def test_main_unwritable_log_file(orders_csv, tmp_path: Path, capsys) -> None:
    config = tmp_path / "config.yaml"
    log_file = tmp_path / "missing" / "run.log"
    config.write_text(f"log_file: {log_file.as_posix()}\n", encoding="utf-8")
    summary = tmp_path / "summary.csv"
    timetable = tmp_path / "timetable.csv"
    code = main([str(orders_csv), str(summary), str(timetable), "--config", str(config)])
    assert code == 1
    assert "Cannot open log file" in capsys.readouterr().err
    assert not summary.exists()
    assert not timetable.exists()


def test_main_missing_input(tmp_path: Path) -> None:
    code = main(
        [str(tmp_path / "nope.csv"), str(tmp_path / "s.csv"), str(tmp_path / "t.csv")]
    )
    assert code == 1


def test_main_with_config_and_charts(orders_csv, tmp_path: Path) -> None:
    charts = tmp_path / "charts"
    trace = tmp_path / "trace.csv"
    log_file = tmp_path / "run.log"
    config = tmp_path / "config.yaml"
    config.write_text(
        f"log_file: {log_file.as_posix()}\n"
        f"search:\n  iter_log: {trace.as_posix()}\n"
        f"charts:\n  enabled: true\n  dir: {charts.as_posix()}\n"
        "output:\n  currency: EUR\n",
        encoding="utf-8",
    )
    summary = tmp_path / "summary.csv"
    code = main(
        [str(orders_csv), str(summary), str(tmp_path / "timetable.csv"), "--config", str(config)]
    )
    assert code == 0
    assert "EUR" in summary.read_text(encoding="utf-8")
    assert (charts / "gantt_schedule.png").exists()
    assert (charts / "convergence.png").exists()
    assert trace.read_text(encoding="utf-8").startswith("iteration,")
    assert "Order scheduler is started" in log_file.read_text(encoding="utf-8")


def test_main_bad_config(orders_csv, tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("calendar: 5\n", encoding="utf-8")
    code = main(
        [
            str(orders_csv),
            str(tmp_path / "s.csv"),
            str(tmp_path / "t.csv"),
            "--config",
            str(config),
        ]
    )
    assert code == 1
