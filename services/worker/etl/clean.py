# services/worker/etl/clean.py
import re

_LINE_BREAKS = ("<br>", "<br/>", "<br />")
_OPENERS = ("<p>", "<div>")
_CLOSERS = ("</p>", "</div>")
_MANY_NEWLINES = re.compile(r"\n{3,}")


def strip_tags(text: str) -> str:
    """Drop every <...> span, left to right.

    A '<' with no '>' after it ends the scan, so stray brackets stay put.
    """
    while True:
        start = text.find("<")
        if start == -1:
            return text
        end = text.find(">", start + 1)
        if end == -1:
            return text
        text = text[:start] + text[end + 1:]


def clean_description(raw: str) -> str:
    """Best-effort HTML -> plain text for feed descriptions. Not a parser."""
    text = raw or ""
    for tag in _LINE_BREAKS:
        text = text.replace(tag, "\n")
    for tag in _OPENERS:
        text = text.replace(tag, "")
    for tag in _CLOSERS:
        text = text.replace(tag, "\n")
    text = strip_tags(text)
    text = _MANY_NEWLINES.sub("\n\n", text)
    return text.strip()
