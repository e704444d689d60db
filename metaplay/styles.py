"""Terminal colour palettes, text styles and render helpers."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass
from typing import TextIO


class ColorLevel(enum.IntEnum):
    """How many colours the terminal can show."""

    NONE = 0
    BASIC = 1
    ANSI256 = 2
    TRUECOLOR = 3


_BASIC_TERM_MARKERS = ("xterm", "screen", "vt100", "vt220", "rxvt", "color", "ansi", "cygwin", "linux")


def _forced_level() -> ColorLevel | None:
    value = os.environ.get("FORCE_COLOR")
    if value is None:
        return None
    value = value.strip().lower()
    if value in ("", "true"):
        return ColorLevel.BASIC
    if value == "false":
        return ColorLevel.NONE
    try:
        return ColorLevel(max(0, min(int(value), 3)))
    except ValueError:
        return ColorLevel.BASIC


def _is_tty(stream: TextIO) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError, OSError):
        return False


def detect_color_level(stream: TextIO | None = None) -> ColorLevel:
    """Work out the colour support of the terminal behind ``stream`` (stdout by default)."""
    stream = sys.stdout if stream is None else stream
    env = os.environ

    forced = _forced_level()
    if forced is ColorLevel.NONE:
        return ColorLevel.NONE
    if forced is None and env.get("NO_COLOR"):
        return ColorLevel.NONE
    if forced is None and not _is_tty(stream):
        return ColorLevel.NONE

    minimum = forced if forced is not None else ColorLevel.NONE
    term = env.get("TERM", "").lower()
    if term == "dumb":
        return minimum
    if env.get("COLORTERM", "").lower() in ("truecolor", "24bit"):
        return ColorLevel.TRUECOLOR
    if "256" in term:
        return max(ColorLevel.ANSI256, minimum)
    if sys.platform == "win32":
        return ColorLevel.TRUECOLOR
    if any(marker in term for marker in _BASIC_TERM_MARKERS):
        return max(ColorLevel.BASIC, minimum)
    return minimum


@dataclass(frozen=True)
class Palette:
    """The named colours used by the command line output."""

    neutral: str
    bright: str
    orange: str
    green: str
    comment_green: str
    blue: str
    red: str
    yellow: str


_PALETTES = {
    ColorLevel.TRUECOLOR: Palette(
        neutral="#737373",
        bright="#e0e0e0",
        orange="#ff7a00",
        green="#28a745",
        comment_green="#6A9955",
        blue="#2d90dc",
        red="#ef4444",
        yellow="#ffff55",
    ),
    ColorLevel.ANSI256: Palette(
        neutral="240",
        bright="252",
        orange="208",
        green="34",
        comment_green="71",
        blue="33",
        red="196",
        yellow="226",
    ),
    ColorLevel.BASIC: Palette(
        neutral="darkgray",
        bright="white",
        orange="yellow",
        green="green",
        comment_green="green",
        blue="blue",
        red="red",
        yellow="yellow",
    ),
    ColorLevel.NONE: Palette(
        neutral="white",
        bright="white",
        orange="white",
        green="white",
        comment_green="white",
        blue="white",
        red="white",
        yellow="white",
    ),
}


def palette_for(level: ColorLevel) -> Palette:
    """Return the palette suited to the given colour level."""
    return _PALETTES[ColorLevel(level)]


_BASIC_COLOR_CODES = {
    "black": 30,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "blue": 34,
    "magenta": 35,
    "cyan": 36,
    "white": 37,
    "darkgray": 90,
    "gray": 90,
}


def _color_code(color: str) -> str:
    if color.startswith("#") and len(color) == 7:
        red, green, blue = (int(color[i : i + 2], 16) for i in (1, 3, 5))
        return f"38;2;{red};{green};{blue}"
    if color.isdigit():
        return f"38;5;{int(color)}"
    try:
        return str(_BASIC_COLOR_CODES[color.lower()])
    except KeyError:
        raise ValueError(f"unknown colour {color!r}") from None


@dataclass(frozen=True)
class Style:
    """A foreground colour with optional bold, rendered as ANSI escapes."""

    foreground: str
    bold: bool = False
    level: ColorLevel = ColorLevel.TRUECOLOR

    def render(self, text: str) -> str:
        """Return ``text`` wrapped in the escape codes of this style."""
        if self.level is ColorLevel.NONE or not text:
            return text
        codes = []
        if self.bold:
            codes.append("1")
        codes.append(_color_code(self.foreground))
        return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


COLOR_LEVEL = detect_color_level()
PALETTE = palette_for(COLOR_LEVEL)

STYLE_TITLE = Style(PALETTE.blue, bold=True, level=COLOR_LEVEL)
STYLE_BRIGHT = Style(PALETTE.bright, bold=True, level=COLOR_LEVEL)
STYLE_SUCCESS = Style(PALETTE.green, level=COLOR_LEVEL)
STYLE_COMMENT = Style(PALETTE.comment_green, level=COLOR_LEVEL)
STYLE_ERROR = Style(PALETTE.red, level=COLOR_LEVEL)
STYLE_WARNING = Style(PALETTE.yellow, level=COLOR_LEVEL)
STYLE_TECHNICAL = Style(PALETTE.blue, level=COLOR_LEVEL)
STYLE_MUTED = Style(PALETTE.neutral, level=COLOR_LEVEL)
STYLE_PROMPT = Style(PALETTE.orange, bold=True, level=COLOR_LEVEL)


def render_bright(text: str) -> str:
    return STYLE_BRIGHT.render(text)


def render_title(text: str) -> str:
    return STYLE_TITLE.render(text)


def render_error(text: str) -> str:
    return STYLE_ERROR.render(text)


def render_warning(text: str) -> str:
    return STYLE_WARNING.render(text)


def render_technical(text: str) -> str:
    """Render technical text; it shares the title style."""
    return STYLE_TITLE.render(text)


def render_attention(text: str) -> str:
    return STYLE_WARNING.render(text)


def render_success(text: str) -> str:
    return STYLE_SUCCESS.render(text)


def render_muted(text: str) -> str:
    return STYLE_MUTED.render(text)


def render_prompt(text: str) -> str:
    return STYLE_PROMPT.render(text)


def render_comment(text: str) -> str:
    """Render text in the darker comment green."""
    return STYLE_COMMENT.render(text)