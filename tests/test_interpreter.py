"""
Tests for the Interpreter module (command tree to queued car actions).
"""

import pytest

from cargo.compiler import Condition, parse
from cargo.events import Signal
from cargo.interpreter import Interpreter
from cargo.scheduler import StepQueue
from cargo.world import Grid, Heading, MazeDescription

# Car facing a wall on three sides; only RIGHT (the finish) is open
POCKET = """
###
#^G
###
"""


def build(maze, events, timers):
    grid = Grid(maze, events)
    queue = StepQueue(dispatcher=events, timer_factory=timers.factory)
    return grid, queue, Interpreter(queue, grid.car, events)


@pytest.fixture
def corridor(corridor_maze, events, timers):
    return build(corridor_maze, events, timers)


@pytest.fixture
def field(open_maze, events, timers):
    return build(open_maze, events, timers)


@pytest.fixture
def boxed(boxed_maze, events, timers):
    return build(boxed_maze, events, timers)


class TestExecutionOrder:
    """Tests for depth-first execution through the queue."""

    def test_block_children_run_before_following_commands(self, field, events, recorder):
        grid, queue, interpreter = field
        rec = recorder(events, Signal.STEP_EXECUTING)
        program = parse("UNLESS WALL AHEAD:\nDRIVE\nTURN LEFT\nEND\nTURN RIGHT")

        interpreter.seed(program)
        queue.drain()

        assert [args[0] for _, args in rec.calls] == [1, 2, 3, 5]
        assert grid.car.position == (3, 2)
        assert grid.car.heading == Heading.RIGHT

    def test_nested_blocks(self, field, events, recorder):
        grid, queue, interpreter = field
        rec = recorder(events, Signal.STEP_EXECUTING)
        program = parse("IF ON FINISH:\nSTOP\nEND\nUNLESS ON CREDIT:\nIF WALL AHEAD:\nSTOP\nEND\nDRIVE\nEND")

        interpreter.seed(program)
        queue.drain()

        # line 1 guard false; 4 expands; 5 guard false; 8 drives
        assert [args[0] for _, args in rec.calls] == [1, 4, 5, 8]
        assert grid.car.position == (3, 2)

    def test_loop_until_finish(self, corridor, events, recorder):
        grid, queue, interpreter = corridor
        rec = recorder(events, Signal.DRIVE, Signal.REACHED_FINISH, Signal.STEP_EXECUTING)

        interpreter.seed(parse("UNTIL ON FINISH:\nDRIVE\nEND"))
        queue.drain()

        assert rec.count(Signal.DRIVE) == 4
        assert rec.count(Signal.REACHED_FINISH) == 1
        lines = [args[0] for name, args in rec.calls if name == Signal.STEP_EXECUTING]
        assert lines == [1, 2, 1, 2, 1, 2, 1, 2, 1]
        assert grid.car.position == (5, 1)
        assert queue.is_empty()

    def test_while_wall_ahead_terminates(self, events, timers, recorder):
        grid, queue, interpreter = build(MazeDescription.from_ascii(POCKET), events, timers)
        rec = recorder(events, Signal.TURN_LEFT)

        interpreter.seed(parse("WHILE WALL AHEAD:\nTURN LEFT\nEND"))
        queue.drain(max_steps=100)

        assert queue.is_empty()
        assert rec.count(Signal.TURN_LEFT) <= 4
        assert grid.car.heading == Heading.RIGHT
        assert not grid.car.is_wall_ahead()

    def test_one_line_loop_does_not_repeat(self, boxed, events, recorder):
        grid, queue, interpreter = boxed
        rec = recorder(events, Signal.TURN_LEFT)

        interpreter.seed(parse("WHILE WALL AHEAD: TURN LEFT"))
        queue.drain()

        assert rec.count(Signal.TURN_LEFT) == 1
        assert queue.is_empty()

    def test_stop_has_no_effect_on_car(self, field, events, recorder):
        grid, queue, interpreter = field
        rec = recorder(events, Signal.DRIVE, Signal.TURN_LEFT, Signal.TURN_RIGHT)

        interpreter.seed(parse("STOP\nDRIVE"))
        queue.drain()

        assert rec.names() == [Signal.DRIVE]

    def test_pickup_then_leave(self, events, timers, recorder):
        grid, queue, interpreter = build(MazeDescription.from_ascii(">$.G"), events, timers)
        rec = recorder(events, Signal.CREDIT_PICKED_UP, Signal.CREDIT_FAILED)

        interpreter.seed(parse("UNTIL ON FINISH:\nIF ON CREDIT: PICK UP CREDIT\nDRIVE\nEND"))
        queue.drain()

        assert rec.names() == [Signal.CREDIT_PICKED_UP]
        assert grid.credit_count() == 0
        assert grid.car.on_finish()


class TestGuards:
    """Tests for condition evaluation."""

    def test_evaluate_reads_sensors(self, boxed, field):
        _, _, boxed_interpreter = boxed
        _, _, field_interpreter = field
        assert boxed_interpreter.evaluate(Condition.WALL_AHEAD)
        assert not field_interpreter.evaluate(Condition.WALL_AHEAD)
        assert not field_interpreter.evaluate(Condition.ON_CREDIT)
        assert not field_interpreter.evaluate(Condition.ON_FINISH)

    @pytest.mark.parametrize("text,turns", [
        ("IF WALL AHEAD: TURN LEFT", 1),
        ("UNLESS WALL AHEAD: TURN LEFT", 0),
        ("WHILE ON FINISH: TURN LEFT", 0),
        ("UNTIL ON FINISH: TURN LEFT", 1),
    ])
    def test_negated_controls(self, boxed, events, recorder, text, turns):
        _, queue, interpreter = boxed
        rec = recorder(events, Signal.TURN_LEFT)
        interpreter.seed(parse(text))
        queue.drain()
        assert rec.count(Signal.TURN_LEFT) == turns

    def test_unguarded_command(self, field):
        _, _, interpreter = field
        (command,) = parse("DRIVE")
        assert interpreter.guard(command)


class TestEndlessPrograms:
    """Tests for programs that never finish on their own."""

    PROGRAM = "WHILE WALL AHEAD:\nTURN LEFT\nEND"

    def test_many_iterations_keep_stack_flat(self, boxed, events, recorder):
        grid, queue, interpreter = boxed
        rec = recorder(events, Signal.TURN_LEFT)

        interpreter.seed(parse(self.PROGRAM))
        assert queue.drain(max_steps=5000) == 5000

        assert rec.count(Signal.TURN_LEFT) == 2500
        assert not queue.is_empty()

    def test_pause_interrupts_timed_run(self, boxed, timers):
        grid, queue, interpreter = boxed
        interpreter.run(parse(self.PROGRAM))
        timers.run(max_ticks=50)
        queue.pause()

        assert not queue.running
        assert timers.pending == []
        assert not queue.is_empty()
        assert grid.car.position == (1, 2)

    def test_clear_interrupts_timed_run(self, boxed, timers):
        _, queue, interpreter = boxed
        interpreter.run(parse(self.PROGRAM))
        timers.run(max_ticks=20)
        queue.clear()

        assert queue.is_empty()
        assert timers.pending == []


class TestRunAndStep:
    """Tests for run / step entry points."""

    def test_run_signals_and_starts_timer(self, corridor, events, timers, recorder):
        _, queue, interpreter = corridor
        rec = recorder(events, Signal.PROGRAM_RUN)
        program = parse("DRIVE")

        interpreter.run(program)

        assert rec.calls == [(Signal.PROGRAM_RUN, (program,))]
        assert queue.running
        assert len(timers.pending) == 1

    def test_timed_run_completes(self, corridor, timers):
        grid, queue, interpreter = corridor
        interpreter.run(parse("UNTIL ON FINISH:\nDRIVE\nEND"))
        timers.run()
        assert grid.car.on_finish()
        assert not queue.running

    def test_step_executes_one_command_at_a_time(self, corridor, events, recorder):
        grid, queue, interpreter = corridor
        rec = recorder(events, Signal.STEP_EXECUTING)
        program = parse("DRIVE\nDRIVE")

        assert interpreter.step(program)
        assert grid.car.position == (2, 1)
        assert queue.paused
        assert interpreter.step(program)
        assert grid.car.position == (3, 1)
        assert [args[0] for _, args in rec.calls] == [1, 2]

    def test_seed_only_when_idle(self, corridor):
        _, queue, interpreter = corridor
        program = parse("DRIVE\nDRIVE")
        assert interpreter.seed(program)
        assert not interpreter.seed(program)
        assert len(queue) == 2

    def test_step_reseeds_after_completion(self, corridor):
        grid, queue, interpreter = corridor
        program = parse("DRIVE")
        interpreter.step(program)
        interpreter.step(program)
        assert grid.car.position == (3, 1)
