"""Clipboard utilities for the CLI frontend.

Uses pyperclip for cross-platform clipboard access.
"""

from __future__ import annotations

import logging

import pyperclip

logger = logging.getLogger(__name__)


def copy_to_clipboard(text: str) -> bool:
    """Copy text to the system clipboard.

    Returns False when no clipboard mechanism is available (e.g. a headless
    server) so the caller can fall back to printing.
    """
    try:
        pyperclip.copy(text)
    except pyperclip.PyperclipException as exc:
        logger.warning("clipboard unavailable: %s", exc)
        return False
    return True
