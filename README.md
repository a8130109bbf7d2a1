# rustdrill

`rustdrill` takes you through a directory of small Rust exercises, one at a time.
Depending on its mode, each exercise is compiled with `rustc`, run as a test
harness, linted with Clippy, or built with Cargo. You move on to the next one
when the exercise passes and its `// I AM NOT DONE` marker is gone.

## Requirements

- Python 3.11 or later
- A Rust toolchain with `rustc` on your `PATH`. Every command checks for
  `rustc --version` first. Clippy and build-script exercises also need `cargo`.
- `git`, for the `reset` command only

## Installation

```
pip install .
```

## The exercise directory

Run `rustdrill` from a directory that holds an `info.toml` file. If that file is
missing, the program says so and exits with status 1. The file lists the
exercises in order:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "No hints this time ;)"
```

`mode` takes one of these values:

- `compile`: build the file with `rustc` and run the binary.
- `test`: build the file with `rustc --test` and run the tests with `--show-output`.
- `clippy`: write `exercises/clippy/Cargo.toml` for the exercise and run
  `cargo clippy` with `-D warnings -D clippy::float_cmp`.
- `buildscript`: write `exercises/tests/Cargo.toml` for the exercise and run
  `cargo test` on it.

An exercise stays pending while its source contains a line such as
`// I AM NOT DONE`. Remove that line when you are ready to move on.

## Commands

```
rustdrill                    # welcome banner and a short guide
rustdrill -v                 # print the version
rustdrill watch              # verify in order, then re-check whenever a file changes
rustdrill watch --success-hints
rustdrill verify             # verify every exercise in order; exit 1 at the first failure
rustdrill run intro1         # compile and run (or test) a single exercise
rustdrill run next           # the first exercise that is not done yet
rustdrill hint intro1        # print the hint for an exercise
rustdrill reset intro1       # run "git stash -- <path>" on the exercise's file
rustdrill list               # name, path and status of every exercise
rustdrill list --unsolved --filter if,variables
rustdrill lsp                # write rust-project.json for rust-analyzer
rustdrill cicvverify         # grade every exercise and write a JSON report
```

`run`, `hint` and `reset` accept `next` as well as an exercise name. If the
name is missing or unknown, the command exits with status 1.

`list` takes these options:

- `-p` / `--paths`: print only the paths
- `-n` / `--names`: print only the names
- `-f` / `--filter`: comma-separated patterns to match against names or paths
- `-u` / `--unsolved`: show only pending exercises
- `-s` / `--solved`: show only finished exercises

The listing always ends with a progress line.

To see the output of test exercises, put `--nocapture` before the subcommand:

```
rustdrill --nocapture run if1
```

### Watch mode

`watch` verifies the exercises in order and stops at the first one that is not
yet solved. After that it watches `./exercises` and re-verifies every time a
`.rs` file there is created or modified. The changed exercise is checked first,
then the other pending ones. While it runs you can type:

- `hint`: print the hint for the current exercise
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, for example `!rustc --explain E0381`
- `help`: list these commands

### Grading

`cicvverify` runs every exercise concurrently with the same checks as `run`.
It prints a line for each exercise as it finishes, then writes
`.github/result/check_result.json`. The report holds a result for each
exercise and statistics: the total count, the numbers of successes and
failures, and the time taken in seconds.

## Environment

- `NO_EMOJI`: set it to any value to print plain symbols in place of emoji.
- `RUST_SRC_PATH`: tells `lsp` where the standard library sources are.
  If it is not set, the location comes from `rustc --print sysroot`.

## Using it from Python

```python
from rustdrill.exercise import load_exercises
from rustdrill.run import RunFailed, run

exercises = load_exercises("info.toml")
pending = [e for e in exercises if not e.looks_done()]
try:
    run(pending[0], verbose=True)
except RunFailed:
    print("not there yet")
```

Some useful functions:

- `Exercise.state()` returns an `ExerciseState`. Its `pending` field holds the
  lines around the marker.
- `rustdrill.verify.verify` raises `VerificationFailed` at the first exercise
  that is not solved.
- `rustdrill.grading.grade_all` returns an `ExerciseCheckList`, which you can
  write out with `write_results`.

## What it does not do

`rustdrill` comes with no exercises. You supply the directory, with its
`info.toml` and the `.rs` files it lists. `rustdrill` compiles and runs those
files, and checks whether they are done.