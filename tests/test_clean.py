import pytest

from services.worker.etl.clean import clean_description, strip_tags


def test_line_breaks_and_paragraphs():
    raw = "<p>Hello<br>world</p><div>Second<br/>line</div>"
    assert clean_description(raw) == "Hello\nworld\nSecond\nline"


def test_other_tags_removed():
    raw = '<h1>Title</h1><ul><li><a href="https://x">Go</a> backend</li></ul>'
    assert clean_description(raw) == "TitleGo backend"


def test_newline_runs_collapsed_and_trimmed():
    raw = "\n\n  <p>a</p>\n\n\n\n<p>b</p>\n\n\n"
    assert clean_description(raw) == "a\n\nb"


def test_unterminated_tag_left_alone():
    assert clean_description("<b text") == "<b text"
    assert clean_description("x < y and more") == "x < y and more"


def test_closed_tag_without_element_end():
    assert clean_description("<b>text") == "text"


def test_stray_closing_bracket_before_tag():
    # '>' before the first '<' must not stop the scan
    assert strip_tags("a > b <i>c</i>") == "a > b c"


def test_empty_and_none():
    assert clean_description("") == ""
    assert clean_description(None) == ""


@pytest.mark.parametrize(
    "raw",
    [
        "<p>Hello</p><p>World</p>",
        "a\n\n\n\n\nb",
        "<<b>>nested",
        "1 < 2 > 0 <br> done",
        "<div><p>x</p></div>\n\n\n<br/>y",
        "plain text",
    ],
)
def test_idempotent(raw):
    once = clean_description(raw)
    assert clean_description(once) == once
