"""
Text helpers for hyphenation and paragraph markup.
"""

from __future__ import annotations

import html
import re

from bs4 import BeautifulSoup
from pyphen import Pyphen

WORD_RE = re.compile(r"[A-Za-z]{7,}")
SOFT_HYPHEN = "\u00ad"
# Inline tags understood by ReportLab's Paragraph parser.
ALLOWED_TAGS = frozenset({"a", "b", "i", "u", "strike", "font", "br", "super", "sub"})

_BOLD_RE = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
_ITALIC_RE = re.compile(r"(?<![*\w])\*(?!\s)(.+?)(?<!\s)\*(?!\*)|(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)")
_CODE_RE = re.compile(r"`([^`]+)`")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.*)$")


def _inline(line: str) -> str:
    escaped = html.escape(line, quote=False)
    escaped = _CODE_RE.sub(r'<font face="Courier">\1</font>', escaped)
    escaped = _LINK_RE.sub(r'<a href="\2" color="blue">\1</a>', escaped)
    escaped = _BOLD_RE.sub(lambda m: f"<b>{m.group(1) or m.group(2)}</b>", escaped)
    return _ITALIC_RE.sub(lambda m: f"<i>{m.group(1) or m.group(2)}</i>", escaped)


def markdown_to_markup(source: str) -> str:
    """Convert a small Markdown subset to ReportLab paragraph markup.

    Handles headings, bullet lines, bold, italic, inline code, and links;
    other syntax is kept as literal text.

    Example:
        >>> markdown_to_markup("**Total**: 3 *items*")
        '<b>Total</b>: 3 <i>items</i>'
    """

    lines = []
    for raw in source.splitlines():
        heading = _HEADING_RE.match(raw)
        bullet = _BULLET_RE.match(raw)
        if heading:
            lines.append(f"<b>{_inline(heading.group(2))}</b>")
        elif bullet:
            lines.append(f"• {_inline(bullet.group(1))}")
        else:
            lines.append(_inline(raw))
    return sanitize_markup("<br/>".join(lines))


def sanitize_markup(markup: str) -> str:
    """Drop tags ReportLab cannot parse, keeping their text.

    Example:
        >>> sanitize_markup('<span class="x"><b>bold</b></span>')
        '<b>bold</b>'
    """

    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup.find_all(True):
        if tag.name not in ALLOWED_TAGS:
            tag.unwrap()
    return soup.decode_contents()


def plain_text_markup(text: str) -> str:
    """Escape plain text for a Paragraph, keeping line breaks."""

    return "<br/>".join(html.escape(line, quote=False) for line in text.split("\n"))


def hyphenate_html(html_fragment: str, dic: Pyphen) -> str:
    """Insert soft hyphens into long words inside an HTML fragment.

    Example:
        >>> dic = Pyphen(lang='en_US')
        >>> hyphenate_html('<b>everlasting</b>', dic).replace(SOFT_HYPHEN, '-')
        '<b>ev-er-last-ing</b>'
    """

    soup = BeautifulSoup(html_fragment, "html.parser")
    for text_node in list(soup.strings):

        def repl(match: re.Match[str]) -> str:
            return dic.inserted(match.group(0), hyphen=SOFT_HYPHEN)

        text_node.replace_with(WORD_RE.sub(repl, str(text_node)))
    return soup.decode_contents()
