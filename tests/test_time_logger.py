import logging

import pytest

from settings import configure
from utils.time_logger import TimeLogger


def test_disabled_by_default():
    timer = TimeLogger()
    timer.start("Total")
    timer.stop("Total")
    timer.stop("never started")
    assert timer.totals() == {}
    assert timer.report() == []


def test_timers_accumulate():
    configure(log_timing=True)
    timer = TimeLogger()
    for _ in range(2):
        with timer.timer("Total"):
            with timer.timer("Merge"):
                pass
    totals = timer.totals()
    assert set(totals) == {"Total", "Merge"}
    assert totals["Total"] >= totals["Merge"] >= 0.0


def test_report_is_relative_to_total():
    configure(log_timing=True)
    timer = TimeLogger()
    with timer.timer("Total"):
        pass
    lines = timer.report()
    assert len(lines) == 2
    assert any(line.endswith(": Total") and "100.0%" in line for line in lines)
    assert any(line.endswith(": TimeLogger") for line in lines)


def test_stop_without_start():
    configure(log_timing=True)
    with pytest.raises(KeyError):
        TimeLogger().stop("Search")


def test_careful_mode_warns(caplog):
    configure(log_timing=True)
    timer = TimeLogger(careful=True)
    with caplog.at_level(logging.WARNING):
        timer.start("Search")
        timer.start("Search")
        timer.stop("Search")
        timer.stop("Search")
    assert "already started: Search" in caplog.text
    assert "isn't running: Search" in caplog.text


def test_reset():
    configure(log_timing=True)
    timer = TimeLogger()
    with timer.timer("Total"):
        pass
    timer.reset()
    assert timer.totals() == {}
