import subprocess

import pytest

from rustdrill.exercise import Exercise, Mode
from rustdrill.verify import (
    VerificationFailed,
    prompt_for_completion,
    test as run_test,
    verify,
)

PENDING_SOURCE = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
DONE_SOURCE = "// fake_exercise\n\nfn main() {\n\n}\n"


class FakeToolchain:
    def __init__(
        self,
        compile_rc=0,
        run_rc=0,
        run_stdout=b"",
        run_stderr=b"",
        compile_stderr=b"",
    ):
        self.compile_rc = compile_rc
        self.run_rc = run_rc
        self.run_stdout = run_stdout
        self.run_stderr = run_stderr
        self.compile_stderr = compile_stderr
        self.calls = []

    def __call__(self, args, *rest, **kwargs):
        args = [str(a) for a in args]
        self.calls.append(args)
        if args[0] in ("rustc", "cargo"):
            return subprocess.CompletedProcess(
                args, self.compile_rc, b"", self.compile_stderr
            )
        return subprocess.CompletedProcess(
            args, self.run_rc, self.run_stdout, self.run_stderr
        )


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("NO_EMOJI", "1")
    return tmp_path


def make_exercise(tmp_path, name, source, mode=Mode.COMPILE, hint="a hint"):
    path = tmp_path / f"{name}.rs"
    path.write_text(source, encoding="utf-8")
    return Exercise(name=name, path=path, mode=mode, hint=hint)


def install(monkeypatch, **kwargs):
    fake = FakeToolchain(**kwargs)
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


def test_verify_all_done_reports_full_progress(tmp_path, monkeypatch, capsys):
    install(monkeypatch)
    exercises = [
        make_exercise(tmp_path, "one", DONE_SOURCE),
        make_exercise(tmp_path, "two", DONE_SOURCE),
    ]
    verify(exercises, (0, 2), False, False)
    out = capsys.readouterr().out
    assert "2/2 (100.0 %)" in out


def test_verify_stops_at_first_pending(tmp_path, monkeypatch):
    fake = install(monkeypatch)
    done = make_exercise(tmp_path, "done", DONE_SOURCE)
    pending = make_exercise(tmp_path, "pending", PENDING_SOURCE)
    later = make_exercise(tmp_path, "later", DONE_SOURCE)
    with pytest.raises(VerificationFailed) as excinfo:
        verify([done, pending, later], (0, 3), False, False)
    assert excinfo.value.exercise is pending
    assert all(str(later.path) not in call for call in fake.calls)


def test_verify_reports_compile_failure(tmp_path, monkeypatch, capsys):
    install(monkeypatch, compile_rc=1, compile_stderr=b"cannot find value `x`")
    exercise = make_exercise(tmp_path, "broken", DONE_SOURCE)
    with pytest.raises(VerificationFailed) as excinfo:
        verify([exercise], (0, 1), False, False)
    out = capsys.readouterr().out
    assert excinfo.value.exercise is exercise
    assert "Compiling of" in out
    assert "cannot find value `x`" in out


def test_verify_reports_run_failure(tmp_path, monkeypatch, capsys):
    install(monkeypatch, run_rc=101, run_stderr=b"thread panicked")
    exercise = make_exercise(tmp_path, "panics", DONE_SOURCE)
    with pytest.raises(VerificationFailed):
        verify([exercise], (0, 1), False, False)
    out = capsys.readouterr().out
    assert f"Ran {exercise} with errors" in out
    assert "thread panicked" in out


@pytest.mark.parametrize("verbose", [True, False])
def test_verify_test_output_shown_only_when_verbose(
    tmp_path, monkeypatch, capsys, verbose
):
    install(monkeypatch, run_stdout=b"THIS TEST TOO SHALL PASS")
    exercise = make_exercise(tmp_path, "testSuccess", DONE_SOURCE, Mode.TEST)
    verify([exercise], (0, 1), verbose, False)
    out = capsys.readouterr().out
    assert ("THIS TEST TOO SHALL PASS" in out) is verbose


def test_verify_builds_test_harness(tmp_path, monkeypatch, capsys):
    fake = install(monkeypatch)
    exercise = make_exercise(tmp_path, "harness", DONE_SOURCE, Mode.TEST)
    verify([exercise], (0, 1), False, False)
    out = capsys.readouterr().out
    assert "1/1 (100.0 %)" in out
    rustc_call = next(call for call in fake.calls if call[0] == "rustc")
    binary_call = next(call for call in fake.calls if call[0] != "rustc")
    assert "--test" in rustc_call
    assert binary_call[1] == "--show-output"


def test_test_raises_on_failing_harness(tmp_path, monkeypatch, capsys):
    install(monkeypatch, run_rc=101, run_stdout=b"assertion failed")
    exercise = make_exercise(tmp_path, "testNotPassed", DONE_SOURCE, Mode.TEST)
    with pytest.raises(VerificationFailed) as excinfo:
        run_test(exercise, False)
    assert excinfo.value.exercise is exercise
    assert "assertion failed" in capsys.readouterr().out


def test_test_does_not_prompt_for_pending(tmp_path, monkeypatch, capsys):
    install(monkeypatch)
    exercise = make_exercise(tmp_path, "pending_test", PENDING_SOURCE, Mode.TEST)
    run_test(exercise, False)
    assert "I AM NOT DONE" not in capsys.readouterr().out


def test_prompt_for_done_exercise_is_silent(tmp_path, capsys):
    exercise = make_exercise(tmp_path, "finished", DONE_SOURCE)
    assert prompt_for_completion(exercise, "ignored", True) is True
    assert capsys.readouterr().out == ""


def test_prompt_for_pending_shows_context(tmp_path, capsys):
    exercise = make_exercise(tmp_path, "pending_exercise", PENDING_SOURCE)
    assert prompt_for_completion(exercise, "program output here", False) is False
    out = capsys.readouterr().out
    assert "~*~ The code is compiling! ~*~" in out
    assert "Output:" in out
    assert "program output here" in out
    assert " 3 |  // I AM NOT DONE" in out
    assert "Hints:" not in out


def test_prompt_shows_hint_when_asked(tmp_path, capsys):
    exercise = make_exercise(tmp_path, "hinted", PENDING_SOURCE, hint="Hello!")
    assert prompt_for_completion(exercise, None, True) is False
    out = capsys.readouterr().out
    assert "Hints:" in out
    assert "Hello!" in out
    assert "Output:" not in out


@pytest.mark.parametrize(
    ("mode", "message"),
    [
        (Mode.TEST, "The code is compiling, and the tests pass!"),
        (Mode.BUILD_SCRIPT, "Build script works!"),
        (Mode.CLIPPY, "The code is compiling, and Clippy is happy!"),
    ],
)
def test_prompt_message_depends_on_mode(tmp_path, capsys, mode, message):
    exercise = make_exercise(tmp_path, "moded", PENDING_SOURCE, mode)
    prompt_for_completion(exercise, None, False)
    assert message in capsys.readouterr().out


def test_verify_clippy_writes_manifest(tmp_path, monkeypatch):
    fake = install(monkeypatch)
    (tmp_path / "exercises" / "clippy").mkdir(parents=True)
    exercise = make_exercise(tmp_path, "clippy1", PENDING_SOURCE, Mode.CLIPPY)
    with pytest.raises(VerificationFailed):
        verify([exercise], (0, 1), False, False)
    manifest = (tmp_path / "exercises" / "clippy" / "Cargo.toml").read_text()
    assert 'name = "clippy1"' in manifest
    assert any(call[:2] == ["cargo", "clippy"] for call in fake.calls)