from __future__ import annotations

from abc import ABC, abstractmethod


class Command(ABC):
    @abstractmethod
    def run(self) -> int:
        raise NotImplementedError


def describe_error(error: BaseException, verbose: bool = False) -> list[str]:
    lines = [str(error) or type(error).__name__]
    if not verbose:
        return lines
    cause = error.__cause__
    while cause is not None:
        lines.append(f"caused by {type(cause).__name__}: {cause}")
        cause = cause.__cause__
    return lines


def print_failure(label: str, error: BaseException, verbose: bool = False) -> None:
    lines = describe_error(error, verbose)
    print(f"  - {label}: {lines[0]}")
    for line in lines[1:]:
        print(f"      {line}")
