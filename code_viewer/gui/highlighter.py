# code_viewer/gui/highlighter.py

from typing import List, Tuple

from PySide6.QtCore import QRegularExpression
from PySide6.QtGui import QColor, QFont, QSyntaxHighlighter, QTextCharFormat, QTextDocument

JS_KEYWORDS = [
    "async", "await", "break", "case", "catch", "class", "const", "continue", "default",
    "delete", "do", "else", "export", "extends", "finally", "for", "function", "if",
    "import", "in", "instanceof", "let", "new", "of", "return", "static", "super",
    "switch", "this", "throw", "try", "typeof", "var", "void", "while", "yield",
]
JS_LITERALS = ["true", "false", "null", "undefined", "NaN", "Infinity"]

PYTHON_KEYWORDS = [
    "and", "as", "assert", "async", "await", "break", "class", "continue", "def", "del",
    "elif", "else", "except", "finally", "for", "from", "global", "if", "import", "in",
    "is", "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try", "while",
    "with", "yield",
]
PYTHON_LITERALS = ["True", "False", "None"]

# Nord palette, readable on both the dark and the light code background.
COLORS = {
    "keyword": "#81A1C1",
    "literal": "#B48EAD",
    "number": "#B48EAD",
    "string": "#A3BE8C",
    "comment": "#7B88A1",
    "function": "#88C0D0",
}


def _char_format(color: str, bold: bool = False, italic: bool = False) -> QTextCharFormat:
    fmt = QTextCharFormat()
    fmt.setForeground(QColor(color))
    if bold:
        fmt.setFontWeight(QFont.Weight.Bold)
    fmt.setFontItalic(italic)
    return fmt


Span = Tuple[int, int]


def _inside(position: int, spans: List[Span]) -> bool:
    return any(start <= position < end for start, end in spans)


class CodeHighlighter(QSyntaxHighlighter):
    """
    A small rule-based highlighter for snippet code.

    Each rule is a regular expression paired with a text format. Strings are
    highlighted before comments, and a comment marker that sits inside a
    string (as in "http://example.com") does not start a comment. Block
    comments (JavaScript `/* ... */`) may span several lines, so their state
    is carried from one text block to the next.
    """
    IN_BLOCK_COMMENT = 1

    def __init__(self, document: QTextDocument, language: str = "javascript"):
        super().__init__(document)
        self.language = language
        self._rules = self._build_rules(language)
        self._string_pattern = QRegularExpression(r"\"(\\.|[^\"\\])*\"|'(\\.|[^'\\])*'|`(\\.|[^`\\])*`")
        self._string_format = _char_format(COLORS["string"])
        self._line_comment = QRegularExpression(r"#" if language == "python" else r"//")
        self._comment_format = _char_format(COLORS["comment"], italic=True)
        self._comment_start = QRegularExpression(r"/\*")
        self._comment_end = QRegularExpression(r"\*/")

    @staticmethod
    def _build_rules(language: str):
        if language == "python":
            keywords, literals = PYTHON_KEYWORDS, PYTHON_LITERALS
        else:
            keywords, literals = JS_KEYWORDS, JS_LITERALS

        return [
            (QRegularExpression(r"\b[A-Za-z_$][\w$]*(?=\s*\()"), _char_format(COLORS["function"])),
            (QRegularExpression(r"\b(" + "|".join(keywords) + r")\b"), _char_format(COLORS["keyword"], bold=True)),
            (QRegularExpression(r"\b(" + "|".join(literals) + r")\b"), _char_format(COLORS["literal"])),
            (QRegularExpression(r"\b\d+(\.\d+)?\b"), _char_format(COLORS["number"])),
        ]

    def highlightBlock(self, text: str):
        """Called by Qt for every line of the document that needs (re)highlighting."""
        for pattern, fmt in self._rules:
            iterator = pattern.globalMatch(text)
            while iterator.hasNext():
                match = iterator.next()
                self.setFormat(match.capturedStart(), match.capturedLength(), fmt)

        string_spans = self._highlight_strings(text)

        # Comments come last so they win over anything they contain.
        comment_start = self._find_outside(self._line_comment, text, 0, string_spans)
        if comment_start >= 0:
            self.setFormat(comment_start, len(text) - comment_start, self._comment_format)

        if self.language != "python":
            code_end = comment_start if comment_start >= 0 else len(text)
            self._highlight_block_comments(text, string_spans, code_end)

    def _highlight_strings(self, text: str) -> List[Span]:
        spans = []
        iterator = self._string_pattern.globalMatch(text)
        while iterator.hasNext():
            match = iterator.next()
            self.setFormat(match.capturedStart(), match.capturedLength(), self._string_format)
            spans.append((match.capturedStart(), match.capturedEnd()))
        return spans

    @staticmethod
    def _find_outside(pattern: QRegularExpression, text: str, offset: int, spans: List[Span]) -> int:
        """Position of the first match at or after offset that is not inside a string, or -1."""
        match = pattern.match(text, offset)
        while match.hasMatch():
            if not _inside(match.capturedStart(), spans):
                return match.capturedStart()
            match = pattern.match(text, match.capturedStart() + 1)
        return -1

    def _highlight_block_comments(self, text: str, string_spans: List[Span], code_end: int):
        self.setCurrentBlockState(0)

        continuing = self.previousBlockState() == self.IN_BLOCK_COMMENT
        start = 0 if continuing else self._next_block_comment(text, 0, string_spans, code_end)
        search_from = 0 if continuing else start + 2

        while start >= 0:
            end_match = self._comment_end.match(text, search_from)
            if end_match.hasMatch():
                length = end_match.capturedEnd() - start
            else:
                self.setCurrentBlockState(self.IN_BLOCK_COMMENT)
                length = len(text) - start
            self.setFormat(start, length, self._comment_format)

            start = self._next_block_comment(text, start + length, string_spans, code_end)
            search_from = start + 2

    def _next_block_comment(self, text: str, offset: int, string_spans: List[Span], code_end: int) -> int:
        start = self._find_outside(self._comment_start, text, offset, string_spans)
        # A "/*" after a line comment marker is part of that comment.
        return start if start < code_end else -1
