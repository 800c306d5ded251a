#!/usr/bin/env python3
"""
CarGo Demo

This script demonstrates compiling a few programs and running them
against the bundled mazes, headless and on the timed step queue.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cargo.compiler import format_program
from cargo.config import create_config
from cargo.events import Signal
from cargo.game import Scorekeeper
from cargo.session import Session
from cargo.world import load_maze

DATA = Path(__file__).parent.parent / "data"


def print_separator(title: str = ""):
    """Print a visual separator."""
    print("\n" + "=" * 70)
    if title:
        print(f"  {title}")
        print("=" * 70)


def demo_headless(maze_name: str, program_name: str):
    """Run a bundled program to completion without timers."""
    print_separator(f"Headless run: {program_name} on {maze_name}")

    session = Session(maze=load_maze(str(DATA / "mazes" / maze_name)))
    scores = Scorekeeper(session.events, credits_in_game=session.grid.credit_count())
    text = (DATA / "programs" / program_name).read_text()

    print("\nProgram:")
    print("\n".join(format_program(session.compile(text) or ())))

    result = session.run_to_completion(text)
    print("\nFinal grid:")
    print(session.grid.to_ascii())
    print(f"\n{result}")
    print(f"Score: {scores.score} (lower is better)")


def demo_realtime():
    """Run on the step queue with a short delay, printing every drive."""
    print_separator("Timed run: endless loop, interrupted with pause()")

    config = create_config(step_delay=5)
    session = Session(maze=load_maze(str(DATA / "mazes" / "corridor.json")), config=config)
    session.events.subscribe(Signal.TURN_LEFT, lambda heading: print(f"  turned to {heading.name}"))

    # Never terminates on its own: the car keeps spinning in place
    session.run("UNTIL ON FINISH:\nTURN LEFT\nEND")
    finished = session.wait(timeout=0.5)
    session.pause()
    print(f"\nFinished on its own: {finished}, steps executed: {session.steps}")
    session.reset()
    print(f"After reset: car at {session.car.position}, {len(session.queue)} commands pending")


def main():
    demo_headless("corridor.json", "corridor.txt")
    demo_headless("ring.json", "ring.txt")
    demo_realtime()


if __name__ == "__main__":
    main()
