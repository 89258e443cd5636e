"""Strip terminal control sequences from captured pty output."""

from __future__ import annotations

import re

# Order matters: style first, then cursor movement, then anything else
# that still looks like an escape sequence.
_SGR = re.compile(r"\x1b\[[0-9;]*m")
_CURSOR = re.compile(r"\x1b\[[0-9;]*[A-HJKSTfsu]")
_CSI = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_OSC = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)")
_OSC_OPEN = re.compile(r"\x1b\][^\x07\x1b\r\n]*")
_CHARSET = re.compile(r"\x1b[()*+][0-9A-Za-z]")
_SHORT = re.compile(r"\x1b[@-Z\\^_a-z=>78]")

# Everything below 0x20 except tab, LF and CR, plus DEL. Includes bare ESC.
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_ESCAPES = (_SGR, _CURSOR, _CSI, _OSC, _OSC_OPEN, _CHARSET, _SHORT)


def _strip_escapes(text: str) -> str:
    for pattern in _ESCAPES:
        text = pattern.sub("", text)
    return text


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences and stray control bytes.

    Line breaks (``\\n``, ``\\r``) and tabs are kept. Removing one sequence
    can splice the surrounding bytes into a new one, so the escape passes
    repeat until the text stops changing. Leftover control bytes go last,
    once no complete sequence remains.
    """
    while True:
        cleaned = _strip_escapes(text)
        if cleaned == text:
            break
        text = cleaned
    return _CONTROL.sub("", text)
