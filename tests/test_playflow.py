from gridgenius.games.core.playflow import Playflow


def test_rounds_record_attempts_and_outcomes():
    pf = Playflow(started_at_ms=0)
    pf.start_round(1, 12, at_ms=0)
    pf.submit(False, 9, at_ms=1_000)
    pf.submit(True, 12, at_ms=2_500)
    pf.start_round(2, 20, at_ms=3_000)
    pf.help()
    pf.submit(True, 20, at_ms=4_000)
    pf.start_round(3, 7, at_ms=5_000)

    s = pf.summary()
    assert s["totals"] == {"solved": 2, "helped": 1, "incorrect": 1, "attempts": 3}
    assert s["accuracy"] == round(2 / 3, 4)
    assert s["buckets"]["solved_no_help_rounds"] == [1]
    assert s["buckets"]["solved_with_help_rounds"] == [2]
    assert s["buckets"]["first_try_rounds"] == [2]
    assert s["buckets"]["struggled_rounds"] == [1]
    assert s["buckets"]["unsolved_rounds"] == [3]
    assert s["per_round"][0]["elapsed_ms"] == 2_500
    assert s["per_round"][2]["final_outcome"] == "unsolved_exit"
    assert "Solved:    2/3" in s["report_text"]


def test_abandoned_round_is_closed_on_next_start():
    pf = Playflow(started_at_ms=0)
    pf.start_round(1, 5, at_ms=0)
    pf.start_round(2, 6, at_ms=800)
    first = pf.rounds[0]
    assert first.final_outcome == "unsolved_exit"
    assert first.elapsed_ms == 800


def test_submissions_after_a_round_closes_are_ignored():
    pf = Playflow(started_at_ms=0)
    pf.start_round(1, 5, at_ms=0)
    pf.submit(True, 5, at_ms=10)
    pf.submit(False, 4, at_ms=20)
    assert pf.current.attempts == 1
    assert pf.current.last_result == 5


def test_finalize_with_custom_outcome():
    pf = Playflow(started_at_ms=0)
    pf.start_round(1, 5, at_ms=0)
    pf.finalize("time_up", at_ms=60_000)
    assert pf.current.final_outcome == "time_up"
    assert pf.summary(finalize=False)["per_round"][0]["elapsed_ms"] == 60_000


def test_empty_summary():
    s = Playflow(started_at_ms=0).summary()
    assert s["accuracy"] == 0.0
    assert s["per_round"] == []
