# code_viewer/gui/clipboard.py

import logging
import os
import shutil
import subprocess
import sys
from typing import List, Optional

from PySide6.QtGui import QClipboard, QGuiApplication

logger = logging.getLogger(__name__)

# Seconds to wait for an external clipboard tool before giving up.
FALLBACK_TIMEOUT = 5


def _copy_with_qt(text: str) -> bool:
    """Writes to the Qt clipboard. Only possible while a Qt GUI application exists."""
    if not isinstance(QGuiApplication.instance(), QGuiApplication):
        return False
    clipboard = QGuiApplication.clipboard()
    clipboard.setText(text, QClipboard.Mode.Clipboard)
    # Some platforms silently refuse clipboard ownership, so read the value back.
    return clipboard.text(QClipboard.Mode.Clipboard) == text


def _fallback_command() -> Optional[List[str]]:
    """Picks an OS clipboard tool for the current platform, if one is installed."""
    if sys.platform == "darwin" and shutil.which("pbcopy"):
        return ["pbcopy"]
    if sys.platform.startswith("win") and shutil.which("clip"):
        return ["clip"]
    if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-copy"):
        return ["wl-copy"]
    if os.environ.get("DISPLAY") and shutil.which("xclip"):
        return ["xclip", "-selection", "clipboard"]
    if os.environ.get("DISPLAY") and shutil.which("xsel"):
        return ["xsel", "--clipboard", "--input"]
    return None


def _copy_with_command(text: str) -> bool:
    command = _fallback_command()
    if command is None:
        logger.warning("No clipboard tool available for fallback copy.")
        return False
    try:
        completed = subprocess.run(command, input=text, text=True, check=False, timeout=FALLBACK_TIMEOUT)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Clipboard tool '{command[0]}' failed: {e}")
        return False
    if completed.returncode != 0:
        logger.warning(f"Clipboard tool '{command[0]}' exited with code {completed.returncode}.")
        return False
    return True


def copy_to_clipboard(text: str) -> bool:
    """
    Copies text to the system clipboard.

    The Qt clipboard is tried first. When it is unavailable (no GUI
    application, or the write did not stick) an OS clipboard tool is used
    instead. Callers only see whether the text ended up on the clipboard.

    Returns:
        True if the text was copied, False otherwise.
    """
    if _copy_with_qt(text):
        logger.debug(f"Copied {len(text)} characters with the Qt clipboard.")
        return True
    logger.info("Qt clipboard unavailable, trying the system clipboard tool.")
    return _copy_with_command(text)
