"""Watch mode: re-verify exercises whenever their files change."""

from __future__ import annotations

import enum
import os
import queue
import subprocess
import sys
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from rustdrill.exercise import Exercise
from rustdrill.verify import VerificationFailed, verify

_HELP = (
    "Commands available to you in watch mode:\n"
    "  hint   - prints the current exercise's hint\n"
    "  clear  - clears the screen\n"
    "  quit   - quits watch mode\n"
    "  !<cmd> - executes a command, like `!rustc --explain E0381`\n"
    "  help   - displays this help message\n"
    "\n"
    "Watch mode automatically re-evaluates the current exercise\n"
    "when you edit a file's contents."
)


class WatchStatus(enum.Enum):
    """How watch mode ended."""

    FINISHED = "finished"
    UNFINISHED = "unfinished"


class WatchShell:
    """Interprets the commands typed while watch mode is running."""

    def __init__(self, hint: str | None = None):
        self.hint = hint
        self.should_quit = threading.Event()

    def handle(self, line: str) -> None:
        """Carry out one command line."""
        command = line.strip()
        if command == "hint":
            if self.hint is not None:
                print(self.hint)
        elif command == "clear":
            print("\x1b[2J\x1b[1;1H")
        elif command == "quit":
            self.should_quit.set()
            print("Bye!")
        elif command == "help":
            print(_HELP)
        elif command.startswith("!"):
            cmd = command[1:]
            parts = cmd.split()
            if not parts:
                print("no command provided")
            else:
                try:
                    subprocess.run(parts, check=False)
                except OSError as err:
                    print(f"failed to execute command `{cmd}`: {err}")
        else:
            print(f"unknown command: {command}")

    def _listen(self, stream: TextIO) -> None:
        while not self.should_quit.is_set():
            try:
                line = stream.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                return
            if not line:
                return
            self.handle(line)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, events: queue.Queue[str]):
        super().__init__()
        self._events = events

    def _push(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._events.put(os.fsdecode(event.src_path))

    def on_created(self, event: FileSystemEvent) -> None:
        self._push(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._push(event)


def _ends_with(path: Path, suffix: Path) -> bool:
    if suffix.is_absolute():
        return path == suffix
    tail = suffix.parts
    return len(tail) <= len(path.parts) and path.parts[len(path.parts) - len(tail):] == tail


def pending_after_change(
    exercises: Sequence[Exercise], changed_path: str | os.PathLike
) -> list[Exercise]:
    """The changed exercise first, then every other exercise not yet done."""
    changed = Path(changed_path).resolve()
    current = next((e for e in exercises if _ends_with(changed, e.path)), None)
    rest = [
        e for e in exercises if not e.looks_done() and not _ends_with(changed, e.path)
    ]
    return ([current] if current is not None else []) + rest


def _clear_screen() -> None:
    print("\x1bc")


def _drain(events: queue.Queue[str]) -> list[str]:
    try:
        first = events.get(timeout=1)
    except queue.Empty:
        return []
    paths = [first]
    while True:
        try:
            path = events.get_nowait()
        except queue.Empty:
            break
        if path not in paths:
            paths.append(path)
    return paths


def watch(
    exercises: Sequence[Exercise], verbose: bool = False, success_hints: bool = False
) -> WatchStatus:
    """Verify all exercises, then re-verify on every change until done or quit."""
    events: queue.Queue[str] = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeHandler(events), "./exercises", recursive=True)
    observer.start()
    try:
        _clear_screen()
        try:
            verify(exercises, (0, len(exercises)), verbose, success_hints)
            return WatchStatus.FINISHED
        except VerificationFailed as failed:
            shell = WatchShell(failed.exercise.hint)

        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        threading.Thread(target=shell._listen, args=(sys.stdin,), daemon=True).start()

        while True:
            for changed in _drain(events):
                path = Path(changed)
                if path.suffix != ".rs" or not path.exists():
                    continue
                pending = pending_after_change(exercises, path)
                num_done = sum(1 for e in exercises if e.looks_done())
                _clear_screen()
                try:
                    verify(pending, (num_done, len(exercises)), verbose, success_hints)
                    return WatchStatus.FINISHED
                except VerificationFailed as failed:
                    shell.hint = failed.exercise.hint
            if shell.should_quit.is_set():
                return WatchStatus.UNFINISHED
    finally:
        observer.stop()
        observer.join()