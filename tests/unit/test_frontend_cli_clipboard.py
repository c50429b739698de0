"""Unit tests for clipboard helpers."""

from unittest.mock import patch

import pyperclip

from keyvault.frontend.cli.clipboard import copy_to_clipboard


def test_copy_to_clipboard_success():
    with patch("keyvault.frontend.cli.clipboard.pyperclip.copy") as copy:
        assert copy_to_clipboard("https://kv.test/f/abc#key=x") is True
    copy.assert_called_once_with("https://kv.test/f/abc#key=x")


def test_copy_to_clipboard_unavailable():
    with patch(
        "keyvault.frontend.cli.clipboard.pyperclip.copy",
        side_effect=pyperclip.PyperclipException("no clipboard"),
    ):
        assert copy_to_clipboard("text") is False
