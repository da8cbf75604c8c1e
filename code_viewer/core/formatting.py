# code_viewer/core/formatting.py

import re

DEFAULT_LANGUAGE = "javascript"

_NON_WORD = re.compile(r"[^\w\s]")
_JS_MARKERS = ("function", "const ", "let ", "=>", "var ")
_PYTHON_MARKERS = ("def ", "import ")


def format_title(title: str) -> str:
    """
    Strips punctuation and symbols from a snippet title.

    Example:
        "Promise.all() polyfill!" -> "Promiseall polyfill"
    """
    return _NON_WORD.sub("", title).strip()


def detect_language(code: str) -> str:
    """
    Guesses the highlighting language of a snippet.

    The collection is JavaScript first, so anything that is not clearly
    Python falls back to JavaScript.
    """
    if any(marker in code for marker in _JS_MARKERS):
        return DEFAULT_LANGUAGE
    if all(marker in code for marker in _PYTHON_MARKERS):
        return "python"
    return DEFAULT_LANGUAGE
