"""
Tests for Session (end-to-end compile and run against a maze).
"""

import json

import pytest

from cargo.config import CargoConfig
from cargo.events import Signal
from cargo.session import RunResult, Session
from cargo.world import DEFAULT_MAZE, Heading

DRIVE_TO_FINISH = "UNTIL ON FINISH:\nDRIVE\nEND"


@pytest.fixture
def config():
    return CargoConfig.from_dict({"max_steps": 500})


@pytest.fixture
def session(corridor_maze, config, events, timers):
    return Session(maze=corridor_maze, config=config, dispatcher=events, timer_factory=timers.factory)


class TestHeadlessRun:
    """Tests for run_to_completion."""

    def test_corridor_reaches_finish(self, session, events, recorder):
        rec = recorder(events, Signal.DRIVE, Signal.REACHED_FINISH)
        result = session.run_to_completion(DRIVE_TO_FINISH)

        assert rec.names() == [Signal.DRIVE] * 4 + [Signal.REACHED_FINISH]
        assert isinstance(result, RunResult)
        assert result.success
        assert result.reached_finish
        assert result.finished
        assert result.position == (5, 1)
        assert result.heading == Heading.RIGHT
        assert result.steps == 9
        assert result.collisions == 0

    def test_parse_error_runs_nothing(self, session, events, recorder):
        rec = recorder(events, Signal.STEP_EXECUTING, Signal.PROGRAM_RUN)
        result = session.run_to_completion("DRIVE\nDRIVE FASTER")

        assert rec.calls == []
        assert not result.success
        assert "DRIVE FASTER" in result.error
        assert session.car.position == (1, 1)

    def test_step_limit_cuts_endless_program(self, session):
        result = session.run_to_completion("UNTIL ON FINISH:\nTURN LEFT\nEND", max_steps=40)
        assert not result.success
        assert not result.finished
        assert result.steps == 40
        assert "step limit" in str(result)

    def test_default_step_limit_from_config(self, session):
        result = session.run_to_completion("WHILE ON CREDIT:\nSTOP\nEND\nUNTIL ON FINISH:\nTURN RIGHT\nEND")
        assert result.steps == 500

    def test_collisions_are_counted(self, session):
        result = session.run_to_completion("TURN LEFT\nDRIVE\nDRIVE")
        assert result.collisions == 2
        assert result.position == (1, 1)

    def test_trace(self, session):
        result = session.run_to_completion("TURN RIGHT\nTURN LEFT\nDRIVE")
        assert [entry["event"] for entry in result.trace] == ["turn_right", "turn_left", "drive"]
        assert result.trace[-1] == {"step": 3, "event": "drive", "position": (2, 1), "heading": "RIGHT"}

    def test_trace_keeps_newest_entries(self, boxed_maze, events, timers):
        config = CargoConfig.from_dict({"max_steps": 500, "trace_limit": 10})
        session = Session(maze=boxed_maze, config=config, dispatcher=events, timer_factory=timers.factory)

        result = session.run_to_completion("WHILE WALL AHEAD:\nTURN LEFT\nEND")

        assert not result.finished
        assert len(session.trace) == 10
        assert len(result.trace) == 10
        assert result.trace[-1]["step"] == result.steps
        assert all(entry["event"] == "turn_left" for entry in result.trace)

    def test_credits_collected(self, events, config, timers):
        session = Session(maze=DEFAULT_MAZE, config=config, dispatcher=events, timer_factory=timers.factory)
        program = (
            "UNTIL ON FINISH:\n"
            "  IF ON CREDIT: PICK UP CREDIT\n"
            "  IF WALL AHEAD: TURN RIGHT\n"
            "  DRIVE\n"
            "END"
        )
        result = session.run_to_completion(program)
        assert result.success
        assert result.credits_collected == 1
        assert session.grid.credit_count() == 0


class TestTimedRun:
    """Tests for run / step / pause on the timer-driven queue."""

    def test_run_with_timers(self, session, timers):
        assert session.run(DRIVE_TO_FINISH)
        assert not session.wait(timeout=0)
        timers.run()
        assert session.car.on_finish()
        assert session.wait(timeout=0)

    def test_run_parse_error(self, session, timers):
        assert not session.run("HONK")
        assert timers.pending == []
        assert session.last_error.line_text == "HONK"

    def test_run_empty_program(self, session):
        assert not session.run("   ")

    def test_step(self, session):
        assert session.step("DRIVE\nTURN LEFT")
        assert session.car.position == (2, 1)
        assert session.step()
        assert session.car.heading == Heading.UP
        assert session.queue.paused

    def test_pause_keeps_pending_commands(self, session, timers):
        session.run(DRIVE_TO_FINISH)
        timers.fire_next()
        timers.fire_next()
        session.pause()
        assert timers.pending == []
        assert not session.queue.is_empty()

        session.run()
        timers.run()
        assert session.car.on_finish()

    def test_new_program_discards_stale_queue(self, session, timers):
        session.run(DRIVE_TO_FINISH)
        timers.fire_next()
        session.pause()

        session.run("TURN LEFT")
        timers.run()
        assert session.car.heading == Heading.UP
        assert session.car.position == (1, 1)

    def test_speed_delegates_to_queue(self, session):
        assert session.faster() == 125.0
        assert session.slower() == 250.0
        session.slower()
        assert session.reset_speed() == 250.0
        assert session.queue.step_delay == 250.0


class TestReset:
    """Tests for Session.reset."""

    def test_reset_restores_world_and_counters(self, session, events, recorder, timers):
        rec = recorder(events, Signal.SESSION_RESET)
        session.run(DRIVE_TO_FINISH)
        for _ in range(4):
            timers.fire_next()

        session.reset()

        assert rec.count(Signal.SESSION_RESET) == 1
        assert session.queue.is_empty()
        assert timers.pending == []
        assert session.car.position == (1, 1)
        assert session.car.heading == Heading.RIGHT
        assert session.steps == 0
        assert list(session.trace) == []

    def test_program_survives_reset(self, session):
        session.run_to_completion(DRIVE_TO_FINISH)
        session.reset()
        result = session.run_to_completion()
        assert result.success
        assert result.steps == 9

    def test_maze_from_config(self, tmp_path, events):
        path = tmp_path / "ring.json"
        path.write_text(json.dumps(DEFAULT_MAZE.to_dict()))
        session = Session(config=CargoConfig.from_dict({"maze_path": str(path)}), dispatcher=events)
        assert session.maze == DEFAULT_MAZE
