"""Checking exercises one after another and prompting once one is solved."""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.status import Status
from rich.text import Text

from rustdrill.exercise import CompiledExercise, Exercise, ExerciseFailed, Mode
from rustdrill.ui import no_emoji, success, warn

_BAR_WIDTH = 60
_SEPARATOR = "===================="


class VerificationFailed(Exception):
    """An exercise failed to build, failed to run, or is still pending."""

    def __init__(self, exercise: Exercise):
        super().__init__(f"verification of {exercise} failed")
        self.exercise = exercise


class _StepFailed(Exception):
    """A build or run step failed; its output has already been shown."""


def _console() -> Console:
    return Console(highlight=False, emoji=False, markup=False)


def _spinner(message: str) -> Status:
    return Console(stderr=True, highlight=False).status(message)


def _percent(position: int, total: int) -> float:
    return position / total * 100.0 if total else 0.0


def _show_progress(position: int, total: int) -> None:
    filled = min(_BAR_WIDTH, int(_BAR_WIDTH * position / total)) if total else 0
    if filled >= _BAR_WIDTH:
        bar = "#" * _BAR_WIDTH
    elif filled > 0:
        bar = "#" * (filled - 1) + ">" + "-" * (_BAR_WIDTH - filled)
    else:
        bar = "-" * _BAR_WIDTH
    line = (
        f"Progress: [{bar}] {position}/{total} "
        f"({_percent(position, total):.1f} %)"
    )
    print(line)


def _compile(exercise: Exercise, status: Status) -> CompiledExercise:
    try:
        return exercise.compile()
    except ExerciseFailed as err:
        status.stop()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise _StepFailed from err


def _compile_only(exercise: Exercise, success_hints: bool) -> bool:
    status = _spinner(f"Compiling {exercise}...")
    status.start()
    try:
        _compile(exercise, status).close()
    finally:
        status.stop()
    return prompt_for_completion(exercise, None, success_hints)


def _compile_and_run_interactively(exercise: Exercise, success_hints: bool) -> bool:
    status = _spinner(f"Compiling {exercise}...")
    status.start()
    try:
        with _compile(exercise, status) as compiled:
            status.update(f"Running {exercise}...")
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.stop()
                warn(f"Ran {exercise} with errors")
                print(err.output.stdout)
                print(err.output.stderr)
                raise _StepFailed from err
    finally:
        status.stop()
    return prompt_for_completion(exercise, output.stdout, success_hints)


def _compile_and_test(
    exercise: Exercise, interactive: bool, verbose: bool, success_hints: bool
) -> bool:
    status = _spinner(f"Testing {exercise}...")
    status.start()
    try:
        with _compile(exercise, status) as compiled:
            try:
                output = compiled.run()
            except ExerciseFailed as err:
                status.stop()
                warn(
                    f"Testing of {exercise} failed! Please try again. "
                    "Here's the output:"
                )
                print(err.output.stdout)
                raise _StepFailed from err
    finally:
        status.stop()
    if verbose:
        print(output.stdout)
    if interactive:
        return prompt_for_completion(exercise, None, success_hints)
    return True


def _check(exercise: Exercise, verbose: bool, success_hints: bool) -> bool:
    match exercise.mode:
        case Mode.TEST | Mode.BUILD_SCRIPT:
            return _compile_and_test(exercise, True, verbose, success_hints)
        case Mode.COMPILE:
            return _compile_and_run_interactively(exercise, success_hints)
        case Mode.CLIPPY:
            return _compile_only(exercise, success_hints)
    raise ValueError(f"unknown mode {exercise.mode!r}")


def verify(
    exercises: Iterable[Exercise],
    progress: tuple[int, int],
    verbose: bool = False,
    success_hints: bool = False,
) -> None:
    """Check exercises in order; raise VerificationFailed at the first one not solved."""
    position, total = progress
    _show_progress(position, total)
    for exercise in exercises:
        try:
            passed = _check(exercise, verbose, success_hints)
        except _StepFailed:
            passed = False
        if not passed:
            raise VerificationFailed(exercise)
        position += 1
        _show_progress(position, total)


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run an exercise's test harness without prompting."""
    try:
        _compile_and_test(exercise, False, verbose, False)
    except _StepFailed as err:
        raise VerificationFailed(exercise) from err


def _success_message(mode: Mode) -> str:
    match mode:
        case Mode.COMPILE:
            return "The code is compiling!"
        case Mode.TEST:
            return "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            if no_emoji():
                return "The code is compiling, and Clippy is happy!"
            return "The code is compiling, and 📎 Clippy 📎 is happy!"
        case Mode.BUILD_SCRIPT:
            return "Build script works!"
    raise ValueError(f"unknown mode {mode!r}")


def _announce(exercise: Exercise) -> None:
    match exercise.mode:
        case Mode.COMPILE:
            success(f"Successfully ran {exercise}!")
        case Mode.TEST:
            success(f"Successfully tested {exercise}!")
        case Mode.CLIPPY | Mode.BUILD_SCRIPT:
            success(f"Successfully compiled {exercise}!")


def prompt_for_completion(
    exercise: Exercise, prompt_output: str | None, success_hints: bool
) -> bool:
    """Return True if the exercise is done; otherwise show where the marker is."""
    state = exercise.state()
    if state.done():
        return True
    console = _console()
    separator = Text(_SEPARATOR, style="bold")

    _announce(exercise)
    message = _success_message(exercise.mode)
    print()
    if no_emoji():
        print(f"~*~ {message} ~*~")
    else:
        print(f"🎉 🎉  {message} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(separator, soft_wrap=True)
        print(prompt_output)
        console.print(separator, soft_wrap=True)
        print()
    if success_hints:
        print("Hints:")
        console.print(separator, soft_wrap=True)
        print(exercise.hint)
        console.print(separator, soft_wrap=True)
        print()

    print("You can keep working on this exercise,")
    instruction = Text("or jump into the next one by removing the ")
    instruction.append("`I AM NOT DONE`", style="bold")
    instruction.append(" comment:")
    console.print(instruction, soft_wrap=True)
    print()
    for context_line in state.pending:
        row = Text()
        row.append(f"{context_line.number:>2}", style="bold blue")
        row.append(" ")
        row.append("|", style="blue")
        row.append("  ")
        row.append(context_line.line, style="bold" if context_line.important else "")
        console.print(row, soft_wrap=True)
    return False