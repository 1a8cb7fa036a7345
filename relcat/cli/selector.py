"""Minimal full-screen terminal selector (single and multiple choice)."""

from __future__ import annotations

import os
import shutil
import sys
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

T = TypeVar("T")

Key = Literal["up", "down", "enter", "toggle", "all", "cancel", "other"]


@dataclass(frozen=True, slots=True)
class SelectorOption[T]:
    value: T
    label: str
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class SelectorResult[T]:
    action: Literal["select", "cancel"]
    values: tuple[T, ...]

    @property
    def value(self) -> T | None:
        return self.values[0] if self.values else None


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _color_enabled() -> bool:
    if not is_interactive_terminal():
        return False
    if os.getenv("NO_COLOR") is not None:
        return False
    return os.getenv("TERM", "").lower() != "dumb"


def _paint(text: str, *codes: str) -> str:
    if not _color_enabled() or not codes:
        return text
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


def _clear() -> None:
    sys.stdout.write("\x1b[2J\x1b[H")


def _decode(ch: str, read: Callable[[], str]) -> Key:
    if ch in ("\r", "\n"):
        return "enter"
    if ch == " ":
        return "toggle"
    if ch in ("a", "A"):
        return "all"
    if ch in ("q", "Q", "\x03"):
        return "cancel"
    if ch == "\x1b":
        if read() == "[":
            c3 = read()
            if c3 == "A":
                return "up"
            if c3 == "B":
                return "down"
        return "cancel"
    return "other"


def _read_key() -> Key:
    if os.name == "nt":
        import msvcrt

        ch = msvcrt.getwch()
        if ch in ("\x00", "\xe0"):
            ch2 = msvcrt.getwch()
            if ch2 == "H":
                return "up"
            if ch2 == "P":
                return "down"
            return "other"
        return _decode(ch, msvcrt.getwch)

    import termios
    import tty

    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        return _decode(sys.stdin.read(1), lambda: sys.stdin.read(1))
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


def _pad(text: str, width: int) -> str:
    if len(text) > width:
        text = text[: max(0, width - 3)] + "..." if width > 3 else text[:width]
    return text.ljust(width)


def _render(
    *,
    title: str,
    options: list[SelectorOption[object]],
    index: int,
    checked: set[int] | None,
) -> None:
    cols = max(60, min(140, shutil.get_terminal_size((100, 30)).columns))
    label_w = max(20, min(48, int(cols * 0.4)))
    detail_w = max(16, cols - label_w - 12)

    _clear()
    print(_paint(title, "1", "96"))
    print()
    for i, opt in enumerate(options):
        cursor = ">" if i == index else " "
        box = "" if checked is None else ("[x] " if i in checked else "[ ] ")
        line = f"{cursor} {box}{_pad(opt.label.strip(), label_w)}  {_pad((opt.detail or '').strip(), detail_w)}"
        print(_paint(line, "1", "30", "46") if i == index else line)
    print()
    if checked is None:
        print(_paint("Up/Down + Enter, q: cancel", "2", "37"))
    else:
        print(_paint("Up/Down, Space: toggle, a: all, Enter: confirm, q: cancel", "2", "37"))
    sys.stdout.flush()


def _run[T](*, title: str, options: list[SelectorOption[T]], multi: bool) -> SelectorResult[T]:
    if not options:
        raise ValueError("selector requires at least one option")
    if not is_interactive_terminal():
        raise RuntimeError("interactive selector requires a TTY")

    idx = 0
    checked: set[int] = set()
    casted: list[SelectorOption[object]] = [
        SelectorOption(value=o.value, label=o.label, detail=o.detail) for o in options
    ]
    while True:
        _render(title=title, options=casted, index=idx, checked=checked if multi else None)
        match _read_key():
            case "up":
                idx = (idx - 1) % len(options)
            case "down":
                idx = (idx + 1) % len(options)
            case "toggle" if multi:
                checked ^= {idx}
            case "all" if multi:
                checked = set() if len(checked) == len(options) else set(range(len(options)))
            case "enter":
                if not multi:
                    return SelectorResult(action="select", values=(options[idx].value,))
                if checked:
                    return SelectorResult(
                        action="select", values=tuple(options[i].value for i in sorted(checked))
                    )
            case "cancel":
                return SelectorResult(action="cancel", values=())
            case _:
                pass


def select_one[T](*, title: str, options: list[SelectorOption[T]]) -> SelectorResult[T]:
    return _run(title=title, options=options, multi=False)


def select_many[T](*, title: str, options: list[SelectorOption[T]]) -> SelectorResult[T]:
    """Checkbox list; Enter with nothing checked keeps the list open."""
    return _run(title=title, options=options, multi=True)


def confirm_yn(*, prompt: str) -> bool:
    if not is_interactive_terminal():
        raise RuntimeError("interactive confirmation requires a TTY")

    while True:
        print(f"{_paint(prompt, '1', '97')} [{_paint('y', '1', '32')}/{_paint('n', '1', '31')}] ", end="")
        sys.stdout.flush()
        answer = sys.stdin.readline().strip().lower()
        if answer in {"y", "yes"}:
            return True
        if answer in {"n", "no", ""}:
            return False
