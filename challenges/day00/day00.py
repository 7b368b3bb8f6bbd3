#!/usr/bin/env python3
# pyright: basic

import pathlib
import sys
import time

HERE = pathlib.Path(__file__).parent


class Day00:
    """Solution for day00."""

    NAME = "day00"

    def __init__(self, data: str):
        self.data = data

    def part_one(self) -> int:
        raise NotImplementedError

    def part_two(self) -> int:
        raise NotImplementedError


def current_part() -> int:
    """Part two once its description has been fetched into README.md, else part one."""
    readme = HERE / "README.md"
    if readme.exists() and "--- Part Two ---" in readme.read_text(encoding="utf-8"):
        return 2
    return 1


def run(input_path: pathlib.Path = HERE / "input.txt") -> int:
    print(f"Running challenge {Day00.NAME}")
    challenge = Day00(input_path.read_text(encoding="utf-8"))
    part = current_part()
    solve = challenge.part_one if part == 1 else challenge.part_two
    start = time.perf_counter()
    answer = solve()
    elapsed = time.perf_counter() - start
    print(f"\tAnswer to part {part}: {answer} ({elapsed * 1000:.2f} ms)")
    return 0


if __name__ == "__main__":
    sys.exit(run(pathlib.Path(sys.argv[1]) if len(sys.argv) > 1 else HERE / "input.txt"))
