import random

import pytest

from app.engine.questions import Parity
from app.engine.scoring import compute_aggregates
from app.engine.session_engine import EngineState, SessionEngine
from app.schemas.sessions import SessionSummaryIn


def _wrong(parity: Parity) -> Parity:
    return Parity.odd if parity is Parity.even else Parity.even


def _engine(clock, emitted=None):
    sink = emitted.append if emitted is not None else None
    return SessionEngine(page_size=20, clock=clock, rng=random.Random(7), on_summary=sink)


def test_start_generates_first_page_and_deadline(clock):
    engine = _engine(clock)
    assert engine.state == EngineState.idle

    engine.start(5)

    assert engine.state == EngineState.running
    assert engine.deadline == clock.now + 5 * 60_000
    assert engine.page_count == 1
    assert len(engine.questions) == 20
    assert engine.remaining_ms() == 5 * 60_000
    assert engine.progress_percent() == 0


@pytest.mark.parametrize("duration", [0, 2, 60])
def test_start_rejects_durations_outside_the_menu(clock, duration):
    engine = _engine(clock)
    with pytest.raises(ValueError):
        engine.start(duration)
    assert engine.state == EngineState.idle


def test_second_answer_does_not_change_the_first(clock):
    engine = _engine(clock)
    engine.start(1)
    q = engine.questions[0]

    clock.advance(1200)
    assert engine.answer(q.id, q.correct_parity.value) is True
    clock.advance(3000)
    assert engine.answer(q.id, _wrong(q.correct_parity).value) is False

    stored = engine.questions[0]
    assert stored.user_answer is q.correct_parity
    assert stored.answer_ended_at == q.answer_started_at + 1200
    assert engine.live_aggregates.answered == 1
    assert engine.live_aggregates.correct == 1


def test_unknown_question_is_ignored(clock):
    engine = _engine(clock)
    engine.start(1)
    assert engine.answer("missing", "odd") is False
    assert engine.live_aggregates.answered == 0


def test_advance_creates_one_page_and_back_does_not_regenerate(clock):
    engine = _engine(clock)
    engine.start(10)
    first_ids = [q.id for q in engine.page_questions()]

    assert engine.advance_page() == 1
    assert engine.page_count == 2
    assert len(engine.questions) == 40
    second_ids = [q.id for q in engine.page_questions()]
    assert len(second_ids) == 20
    assert not set(first_ids) & set(second_ids)

    assert engine.previous_page() == 0
    assert [q.id for q in engine.page_questions()] == first_ids

    assert engine.advance_page() == 1
    assert engine.page_count == 2
    assert [q.id for q in engine.page_questions()] == second_ids


def test_previous_page_stops_at_first(clock):
    engine = _engine(clock)
    engine.start(1)
    assert engine.previous_page() == 0


def test_tick_finishes_only_at_deadline(clock):
    engine = _engine(clock)
    engine.start(1)

    clock.advance(59_999)
    assert engine.tick() is False
    assert engine.state == EngineState.running

    clock.advance(1)
    assert engine.tick() is True
    assert engine.state == EngineState.finished
    assert engine.remaining_ms() == 0
    assert engine.progress_percent() == 100
    assert engine.tick() is False


def test_answer_after_deadline_is_not_counted(clock):
    engine = _engine(clock)
    engine.start(1)
    q = engine.questions[0]

    clock.advance(60_000)
    assert engine.answer(q.id, "odd") is False
    assert engine.state == EngineState.finished
    assert engine.live_aggregates.answered == 0


def test_full_page_scenario(clock):
    emitted = []
    engine = _engine(clock, emitted)
    engine.start(1)
    deadline = engine.deadline

    for i, q in enumerate(engine.questions):
        clock.advance(500 + i * 10)
        parity = q.correct_parity if i < 12 else _wrong(q.correct_parity)
        assert engine.answer(q.id, parity.value)

    live = engine.live_aggregates
    assert (live.answered, live.correct, live.wrong) == (20, 12, 8)
    assert compute_aggregates(engine.questions) == live

    clock.now = deadline
    assert engine.tick()
    summary = engine.acknowledge()

    assert (summary.answered, summary.correct, summary.wrong) == (20, 12, 8)
    assert len(summary.speed_series) == 20
    assert [s.x for s in summary.speed_series] == list(range(1, 21))
    assert summary.avg_seconds > 0
    assert summary.avg_seconds == sum(s.seconds for s in summary.speed_series) / 20
    assert summary.started_at == deadline - 60_000
    assert summary.ended_at == deadline
    assert emitted == [summary]


def test_no_answers_scenario(clock):
    emitted = []
    engine = _engine(clock, emitted)
    engine.start(1)

    clock.advance(61_000)
    engine.tick()
    summary = engine.acknowledge()

    assert (summary.answered, summary.correct, summary.wrong) == (0, 0, 0)
    assert summary.avg_seconds == 0
    assert summary.speed_series == []
    assert emitted == [summary]


def test_speed_series_skips_unanswered_questions(clock):
    engine = _engine(clock)
    engine.start(5)
    qs = engine.questions

    clock.advance(1000)
    engine.answer(qs[3].id, "odd")
    clock.advance(1000)
    engine.answer(qs[1].id, "even")
    engine.advance_page()
    clock.advance(1000)
    engine.answer(engine.page_questions()[0].id, "odd")

    clock.advance(5 * 60_000)
    engine.tick()
    summary = engine.acknowledge()

    assert summary.answered == 3
    assert [s.x for s in summary.speed_series] == [1, 2, 3]
    # generation order: q1 (2s), q3 (1s), first of page two (started at page creation, 1s later)
    assert [s.seconds for s in summary.speed_series] == [2.0, 1.0, 1.0]


def test_acknowledge_only_from_finished(clock):
    emitted = []
    engine = _engine(clock, emitted)
    assert engine.acknowledge() is None

    engine.start(1)
    assert engine.acknowledge() is None
    assert engine.state == EngineState.running
    assert emitted == []


def test_acknowledge_clears_state(clock):
    engine = _engine(clock)
    engine.start(1)
    clock.advance(60_000)
    engine.tick()
    engine.acknowledge()

    assert engine.state == EngineState.idle
    assert engine.questions == ()
    assert engine.deadline is None
    assert engine.live_aggregates.answered == 0
    assert engine.acknowledge() is None


def test_start_while_running_discards_previous_session(clock):
    emitted = []
    engine = _engine(clock, emitted)
    engine.start(1)
    old_ids = {q.id for q in engine.questions}
    engine.answer(engine.questions[0].id, "odd")

    clock.advance(10_000)
    engine.start(5)

    assert engine.state == EngineState.running
    assert engine.deadline == clock.now + 5 * 60_000
    assert not old_ids & {q.id for q in engine.questions}
    assert engine.live_aggregates.answered == 0
    assert emitted == []


def test_reset_discards_without_emitting(clock):
    emitted = []
    engine = _engine(clock, emitted)
    engine.start(1)
    clock.advance(60_000)
    engine.tick()

    engine.reset()

    assert engine.state == EngineState.idle
    assert emitted == []


def test_snapshot_reveals_correctness_only_in_after_mode(clock):
    engine = _engine(clock)
    engine.start(1, reveal_mode="after")
    q = engine.questions[0]
    engine.answer(q.id, q.correct_parity.value)

    snap = engine.snapshot()
    assert snap["state"] == "running"
    assert snap["answered"] == 1 and snap["correct"] == 1 and snap["wrong"] == 0
    assert snap["questions"][0]["is_correct"] is True
    assert "is_correct" not in snap["questions"][1]

    engine.start(1)
    q = engine.questions[0]
    engine.answer(q.id, q.correct_parity.value)
    assert "is_correct" not in engine.snapshot()["questions"][0]


def test_snapshot_positions_continue_across_pages(clock):
    engine = _engine(clock)
    engine.start(1)
    engine.advance_page()
    snap = engine.snapshot()
    assert snap["page"] == 1
    assert snap["questions"][0]["position"] == 21


def test_summary_still_valid_after_clock_steps_back(clock):
    emitted = []
    engine = _engine(clock, emitted)
    engine.start(1)
    q = engine.questions[0]

    clock.advance(-2000)
    assert engine.answer(q.id, "odd")

    clock.now = engine.deadline
    engine.tick()
    summary = engine.acknowledge()

    assert [s.seconds for s in summary.speed_series] == [0.0]
    assert summary.avg_seconds == 0.0
    SessionSummaryIn.model_validate(summary.to_payload())
