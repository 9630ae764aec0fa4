"""Mode selection and payload sources consumed by the sender."""
from __future__ import annotations
import pathlib
from typing import Callable, Optional

from keyrelay.protocol.constants import MODE_PROMPT


class PayloadUnavailable(Exception):
    """The payload to transmit could not be obtained."""


SAMPLE_PAYLOAD = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit, sed do eiusmod "
    "tempor incididunt ut labore et dolore magna aliqua. Ut enim ad minim veniam, "
    "quis nostrud exercitation ullamco laboris nisi ut aliquip ex ea commodo "
    "consequat. Duis aute irure dolor in reprehenderit in voluptate velit esse "
    "cillum dolore eu fugiat nulla pariatur. Excepteur sint occaecat cupidatat non "
    "proident, sunt in culpa qui officia deserunt mollit anim id est laborum.\n"
).encode("utf-8")


def prompt_mode_selector(input_fn: Optional[Callable[[str], str]] = None,
                         output_fn: Optional[Callable[[str], None]] = None) -> Callable[[], int]:
    def select() -> int:
        ask = input_fn or input
        say = output_fn or print
        say(MODE_PROMPT)
        while True:
            raw = ask("> ").strip()
            try:
                return int(raw)
            except ValueError:
                say(f"Not a number: {raw!r}. {MODE_PROMPT}")
    return select


def fixed_selector(selector: int) -> Callable[[], int]:
    return lambda: selector


class FilePayloadSource:
    def __init__(self, path: str | pathlib.Path):
        self.path = pathlib.Path(path)

    def __call__(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise PayloadUnavailable(f"cannot read payload {self.path}: {e}") from e

    def __repr__(self) -> str:
        return f"FilePayloadSource({str(self.path)!r})"


class StaticPayloadSource:
    def __init__(self, data: bytes = SAMPLE_PAYLOAD):
        self.data = bytes(data)

    def __call__(self) -> bytes:
        return self.data
