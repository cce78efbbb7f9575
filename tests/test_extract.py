# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

import logging

import pytest
from lxml import etree as et

from ytcompile.lib.extract import (
    TemplateEntry,
    extract_templates,
    load_templates,
)
from ytcompile.lib.sources import TemplateFile
from ytcompile.lib.validation import TemplateParseError


def test_single_template(hello_template):
    assert extract_templates(hello_template) == [
        TemplateEntry("hello", "Hello {{planet}}!")
    ]


def test_templates_in_document_order():
    text = """
<script id="one" type="x-template">1</script>
<script id="two" type="text/x-handlebars-template">2</script>
<script id="three" type="x-template">3</script>
"""
    assert [entry.name for entry in extract_templates(text)] == [
        "one",
        "two",
        "three",
    ]


def test_source_is_raw_text():
    source = '\n  <p class="x">{{planet}} &amp; <%= data.moon %>\n'
    text = f'<script id="raw" type="x-template">{source}</script>'

    (entry,) = extract_templates(text)

    assert entry.source == source


def test_crlf_line_endings_are_normalised(tmp_path):
    path = tmp_path / "dos.mu"
    path.write_bytes(b'<script id="a" type="x-template">a\r\nb</script>\r\n')

    assert load_templates(TemplateFile(str(path), ".mu")) == [
        TemplateEntry("a", "a\nb")
    ]


def test_unrecognised_type_is_skipped(caplog):
    caplog.set_level(logging.INFO, logger="ytcompile.extract")
    text = (
        '<script id="js" type="text/javascript">var a;</script>'
        '<script id="tmpl" type="x-template">{{a}}</script>'
        '<script id="untyped">{{b}}</script>'
    )

    assert extract_templates(text, filename="page.hbs") == [
        TemplateEntry("tmpl", "{{a}}")
    ]
    skips = [
        record
        for record in caplog.records
        if "irrelevant type attribute" in record.getMessage()
    ]
    assert len(skips) == 2
    assert skips[0].getMessage().startswith("page.hbs: ")


def test_empty_marker_is_skipped():
    text = (
        '<script id="empty" type="x-template"></script>'
        '<script id="full" type="x-template">x</script>'
    )
    assert extract_templates(text) == [TemplateEntry("full", "x")]


def test_whitespace_only_marker_is_kept():
    text = '<script id="blank" type="x-template">\n</script>'
    assert extract_templates(text) == [TemplateEntry("blank", "\n")]


def test_nested_markers_are_ignored():
    text = (
        '<div><script id="inner" type="x-template">in</script></div>'
        "<!-- a comment -->"
        '<script id="outer" type="x-template">out</script>'
    )
    assert extract_templates(text) == [TemplateEntry("outer", "out")]


def test_last_duplicate_wins_in_first_position(caplog):
    text = (
        '<script id="a" type="x-template">first a</script>'
        '<script id="b" type="x-template">b</script>'
        '<script id="a" type="x-template">second a</script>'
    )

    assert extract_templates(text) == [
        TemplateEntry("a", "second a"),
        TemplateEntry("b", "b"),
    ]
    assert any(
        record.levelno == logging.WARNING
        and "'a' is defined more than once" in record.getMessage()
        for record in caplog.records
    )


def test_missing_and_empty_ids_are_named_empty(caplog):
    text = (
        '<script type="x-template">no id</script>'
        '<script id="" type="x-template">empty id</script>'
    )

    assert extract_templates(text) == [TemplateEntry("", "empty id")]
    warnings = [
        record.getMessage()
        for record in caplog.records
        if record.levelno == logging.WARNING
    ]
    assert len(warnings) == 3


def test_no_markers():
    assert extract_templates("<p>nothing to see</p>") == []
    assert extract_templates("") == []


def test_parse_error(monkeypatch, hello_template):
    def fail(*args, **kwargs):
        raise et.ParserError("Document is empty")

    monkeypatch.setattr(
        "ytcompile.lib.extract.html.document_fromstring", fail
    )

    with pytest.raises(TemplateParseError, match="Document is empty"):
        extract_templates(hello_template)


def test_load_templates(tmp_path, hello_template):
    path = tmp_path / "greeting.hbs"
    path.write_text(hello_template)

    assert load_templates(TemplateFile(str(path), ".hbs")) == [
        TemplateEntry("hello", "Hello {{planet}}!")
    ]


def test_load_templates_missing_file(tmp_path):
    with pytest.raises(OSError):
        load_templates(TemplateFile(str(tmp_path / "gone.hbs"), ".hbs"))
