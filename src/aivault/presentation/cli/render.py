"""Shared console rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Iterable, List, Sequence

from aivault.presentation.cli.config import ENV_DEBUG

BOX_WIDTH = 64


def debug_enabled() -> bool:
    """Return True only when AIVAULT_DEBUG is explicitly set to '1'."""
    return os.getenv(ENV_DEBUG) == "1"


def wrap_text_for_box(text: str, width: int, *, indent_continuation: bool = True) -> List[str]:
    """
    Wrap text on word boundaries so every line fits within ``width``.

    A leading "- " bullet stays on the first line; continuation lines are
    indented by two spaces when ``indent_continuation`` is set. Explicit
    newlines in ``text`` are kept as paragraph breaks.
    """
    if not text or width <= 0:
        return [text] if text else [""]
    continuation = "  " if indent_continuation else ""
    lines: List[str] = []
    for paragraph in text.split("\n"):
        wrapped = textwrap.wrap(
            paragraph,
            width=width,
            subsequent_indent=continuation,
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [""])
    return lines


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_box(title: str, body: Iterable[str], width: int = BOX_WIDTH) -> None:
    inner = width - 4
    print("+" + "-" * (width - 2) + "+")
    print(f"| {title[:inner]:<{inner}} |")
    print("+" + "-" * (width - 2) + "+")
    for paragraph in body:
        for line in wrap_text_for_box(paragraph, inner):
            print(f"| {line:<{inner}} |")
    print("+" + "-" * (width - 2) + "+")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_bullet_lines(lines: Iterable[str]) -> None:
    for line in lines:
        print(f"- {line}")


def progress_bar(done: int, total: int, width: int = 10) -> str:
    if total <= 0:
        return "[" + " " * width + "]"
    filled = min(width, round(width * done / total))
    return "[" + "#" * filled + "." * (width - filled) + "]"


def format_room_line(name: str, *, unlocked: bool, completed: bool, solved: int, total: int) -> str:
    if completed:
        status = "COMPLETE"
    elif unlocked:
        status = f"{progress_bar(solved, total)} {solved}/{total}"
    else:
        status = "LOCKED"
    return f"{name:<36} {status}"


def format_badge_line(icon: str, name: str, criteria: str, *, earned: bool) -> str:
    marker = icon if earned else "?"
    suffix = "" if earned else " (locked)"
    return f"{marker} {name}{suffix}: {criteria}"
