"""Running a single exercise and resetting it."""

from __future__ import annotations

import subprocess

from rich.console import Console

from rustdrill.exercise import Exercise, ExerciseFailed, Mode
from rustdrill.ui import success, warn
from rustdrill.verify import VerificationFailed, test


class RunFailed(Exception):
    """Running or resetting an exercise did not succeed."""

    def __init__(self, exercise: Exercise):
        super().__init__(f"running {exercise} failed")
        self.exercise = exercise


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run one exercise, or run its tests; raise RunFailed on failure."""
    if exercise.mode in (Mode.TEST, Mode.BUILD_SCRIPT):
        try:
            test(exercise, verbose)
        except VerificationFailed as err:
            raise RunFailed(exercise) from err
    else:
        _compile_and_run(exercise)


def reset(exercise: Exercise) -> None:
    """Stash the local changes to the exercise's file."""
    try:
        subprocess.run(["git", "stash", "--", str(exercise.path)], check=False)
    except OSError as err:
        raise RunFailed(exercise) from err


def _compile_and_run(exercise: Exercise) -> None:
    status = Console(stderr=True, highlight=False).status(f"Compiling {exercise}...")
    status.start()
    try:
        try:
            compiled = exercise.compile()
        except ExerciseFailed as err:
            status.stop()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(err.output.stderr)
            raise RunFailed(exercise) from err
        with compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.stop()
                print(err.output.stdout)
                print(err.output.stderr)
                warn(f"Ran {exercise} with errors")
                raise RunFailed(exercise) from err
    finally:
        status.stop()
    print(output.stdout)
    success(f"Successfully ran {exercise}")