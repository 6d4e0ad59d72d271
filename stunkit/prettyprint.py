"""Word-wrapping of usage text to a console width."""

import re
import sys

_PARAGRAPH_BREAK = re.compile(r"\r\n|\r|\n")
_WORD_SPLIT = re.compile(r"[ \t\v\r\n]+")
_LEADING_SPACE = re.compile(r"[ \t\v\r\n]*")


def split_paragraphs(text):
    """Split text at CR, LF or CRLF; a trailing line break adds no paragraph."""
    if not text:
        return []
    parts = _PARAGRAPH_BREAK.split(text)
    if _PARAGRAPH_BREAK.search(text[-1]):
        parts.pop()
    return parts


def wrap_paragraph(paragraph, width):
    """Wrap one paragraph to ``width`` columns, keeping its leading indent.

    A word longer than the width is placed alone on its line. An empty
    paragraph yields a single empty line; a non-positive width yields nothing.
    """
    if width <= 0 or paragraph is None:
        return []
    indent_len = min(len(_LEADING_SPACE.match(paragraph).group()), width - 1)
    indent = " " * indent_len
    words = [word for word in _WORD_SPLIT.split(paragraph) if word]
    if not words:
        return [""]

    lines = []
    line = None
    for word in words:
        if line is None:
            line = indent + word
        elif len(line) + 1 + len(word) <= width:
            line += " " + word
        else:
            lines.append(line)
            line = indent + word
    lines.append(line)
    return lines


def pretty_lines(text, width):
    """Yield the wrapped lines of every paragraph in ``text``."""
    for paragraph in split_paragraphs(text):
        yield from wrap_paragraph(paragraph, width)


def pretty_print(text, width, file=None):
    """Print ``text`` wrapped to ``width`` columns."""
    out = sys.stdout if file is None else file
    for line in pretty_lines(text, width):
        print(line, file=out)