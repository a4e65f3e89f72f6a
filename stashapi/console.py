"""Interactive prompts and output formatting shared by the command-line clients."""

from __future__ import annotations

import re
import sys
from decimal import Decimal
from enum import Enum
from http import HTTPStatus
from typing import TextIO

from termcolor import colored

from .models import USIZE_MAX

STREAM_CLOSED = "Input stream closed unexpectedly."
INVALID_NUMBER = "Invalid input. Please enter a number."
INVALID_CONFIRMATION = "Invalid input. Please enter 'yes' or 'no'."
INVALID_ACTION = "Invalid action. Please enter a number (1-4), method name, or EXIT."
ACTION_MENU = "Select action: [1] GET, [2] POST, [3] PUT, [4] DELETE, [EXIT]"

_UNSIGNED = re.compile(r"\+?[0-9]+")
_SIGNED = re.compile(r"[+-]?[0-9]+")


class Method(Enum):
    """The HTTP methods a client session can issue."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


_ACTIONS: dict[str, Method | None] = {
    "1": Method.GET,
    "get": Method.GET,
    "2": Method.POST,
    "post": Method.POST,
    "3": Method.PUT,
    "put": Method.PUT,
    "4": Method.DELETE,
    "delete": Method.DELETE,
    "exit": None,
    "quit": None,
    "q": None,
}

_YES = {"yes", "y"}
_NO = {"no", "n"}


class Console:
    """Line-oriented prompts over text streams, coloured when writing to a terminal."""

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        self.stdin = sys.stdin if stdin is None else stdin
        self.stdout = sys.stdout if stdout is None else stdout
        self.stderr = sys.stderr if stderr is None else stderr
        isatty = getattr(self.stdout, "isatty", None)
        self._color = bool(isatty and isatty())

    def style(self, text: str, color: str | None = None, *attrs: str) -> str:
        """Return text with terminal colour and attributes, if colour is in use."""
        if not self._color or (color is None and not attrs):
            return text
        return colored(text, color, attrs=list(attrs) or None, force_color=True)

    def echo(self, text: str = "") -> None:
        """Write a line to standard output."""
        print(text, file=self.stdout)

    def echo_error(self, text: str) -> None:
        """Write a line to standard error."""
        print(text, file=self.stderr)

    def read_line(self, prompt: str) -> str:
        """Show a prompt and return the next input line, trimmed."""
        self.stdout.write(f"{self.style(prompt, 'cyan')} {self.style('> ', 'cyan')}")
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise EOFError(STREAM_CLOSED)
        return line.strip()

    def _read_number(self, prompt: str, pattern: re.Pattern[str], minimum: int, maximum: int) -> int:
        while True:
            text = self.read_line(prompt)
            if pattern.fullmatch(text) is not None and minimum <= int(text) <= maximum:
                return int(text)
            self.echo_error(self.style(INVALID_NUMBER, "red"))

    def read_uint(self, prompt: str) -> int:
        """Ask until a non-negative 64-bit integer is entered."""
        return self._read_number(prompt, _UNSIGNED, 0, USIZE_MAX)

    def read_int(self, prompt: str, minimum: int, maximum: int) -> int:
        """Ask until an integer within the given bounds is entered."""
        return self._read_number(prompt, _SIGNED, minimum, maximum)

    def read_confirmation(self, prompt: str) -> bool:
        """Ask a yes/no question until it is answered."""
        while True:
            answer = self.read_line(f"{prompt} (yes/no)").lower()
            if answer in _YES:
                return True
            if answer in _NO:
                return False
            self.echo_error(self.style(INVALID_CONFIRMATION, "red"))

    def prompt_for_method(self) -> Method | None:
        """Ask for the next action; None means the session should end."""
        self.echo("\n" + self.style(ACTION_MENU, None, "bold"))
        while True:
            answer = self.read_line("Action").lower()
            if answer in _ACTIONS:
                return _ACTIONS[answer]
            self.echo_error(self.style(INVALID_ACTION, "red"))


def _display_float(value: float) -> str:
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return f"{text:>3}"


def format_duration(nanos: int) -> str:
    """Render an elapsed time given in nanoseconds with a fitting unit."""
    if nanos < 1_000:
        return f"{nanos} ns"
    micros = nanos / 1_000.0
    if micros < 1_000.0:
        return f"{_display_float(micros)} µs"
    millis = micros / 1_000.0
    if millis < 1_000.0:
        return f"{_display_float(millis)} ms"
    return f"{_display_float(millis / 1_000.0)} s"


def describe_status(code: int) -> str:
    """Return a status code followed by its standard reason phrase."""
    try:
        reason = HTTPStatus(code).phrase
    except ValueError:
        reason = "<unknown status code>"
    return f"{code} {reason}"