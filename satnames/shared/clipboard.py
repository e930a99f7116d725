"""Copy transaction ids and URLs out of the terminal UI."""

from __future__ import annotations

import base64
import logging
import os
import sys
from typing import TextIO

import pyperclip

logger = logging.getLogger(__name__)


def copy_with_osc52(text: str, stream: TextIO | None = None) -> bool:
    if not text:
        return False

    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    sequence = f"\x1b]52;c;{payload}\x07"
    # tmux only forwards OSC 52 inside a DCS passthrough.
    if os.getenv("TMUX"):
        sequence = f"\x1bPtmux;\x1b{sequence}\x1b\\"

    # `sys.__stdout__` is the real terminal while a TUI owns `sys.stdout`.
    output = stream or sys.__stdout__ or sys.stdout
    try:
        output.write(sequence)
        output.flush()
    except (OSError, ValueError) as e:
        logger.debug("OSC 52 copy failed: %s", e)
        return False
    return True


def copy_with_pyperclip(text: str) -> bool:
    if not text:
        return False
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as e:
        logger.debug("pyperclip copy failed: %s", e)
        return False
    return True


def copy_text(text: str, prefer_osc52: bool = False) -> str | None:
    """Copy ``text`` and return the method that worked, or None."""
    if prefer_osc52:
        methods = (("osc52", copy_with_osc52), ("pyperclip", copy_with_pyperclip))
    else:
        methods = (("pyperclip", copy_with_pyperclip), ("osc52", copy_with_osc52))

    for name, method in methods:
        if method(text):
            return name
    return None
