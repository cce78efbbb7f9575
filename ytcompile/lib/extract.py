# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Extract named template bodies from `<script>` elements.

Template files contain a `<script>` element per template, e.g.:

    <script id="foo" type="x-template">
     Hello {{planet}}!
    </script>

The `id` attribute names the template and the element's text is the template
source.  Only top-level elements are considered.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, FrozenSet, List, NamedTuple

# No stubs.
import lxml.html as html  # type: ignore
from lxml import etree as et

from ytcompile.lib.sources import TemplateFile
from ytcompile.lib.validation import TemplateParseError

if TYPE_CHECKING:
    from typing_extensions import Final

log = logging.getLogger("ytcompile.extract")

MARKER_TAG: Final = "script"
MARKER_TYPES: Final[FrozenSet[str]] = frozenset(
    {"x-template", "text/x-handlebars-template"}
)


class TemplateEntry(NamedTuple):
    """A template's name and its uncompiled source."""

    name: str
    source: str


def parse_top_level(text: str) -> List[html.HtmlElement]:
    """Parse `text` as an HTML fragment and return its top-level nodes.

    Comments are included; leading text is not.  libxml2 normalises CRLF
    line endings, even inside <script>.
    """
    # An explicit <body> stops libxml2 from moving <script> into <head>.
    try:
        doc = html.document_fromstring(f"<html><body>{text}</body></html>")
    except (et.LxmlError, ValueError) as e:
        raise TemplateParseError(
            f"an error occurred while parsing markup: {e}"
        ) from None
    body = doc.find("body")
    if body is None:
        return []
    return list(body)


def extract_templates(
    text: str, filename: str = "<string>"
) -> List[TemplateEntry]:
    """Return the templates defined in `text`, in document order.

    When an identifier is used more than once, the last definition wins but
    keeps the position of the first.
    """
    found: Dict[str, str] = {}
    for node in parse_top_level(text):
        # Comments and processing instructions have a non-string tag.
        if node.tag != MARKER_TAG:
            continue
        # Script content is raw text, so it can only ever be one text node.
        if node.get("type") not in MARKER_TYPES or not node.text:
            log.info(
                f"{filename}: <script> element empty or has irrelevant type attribute, skipping"
            )
            continue

        name = node.get("id")
        if name is None:
            log.warning(
                f"{filename}: template on line {node.sourceline} has no id, naming it ''"
            )
            name = ""
        elif not name:
            log.warning(
                f"{filename}: template on line {node.sourceline} has an empty id"
            )
        if name in found:
            log.warning(
                f"{filename}: template '{name}' is defined more than once, using the last definition"
            )
        found[name] = node.text
    return [TemplateEntry(name, source) for name, source in found.items()]


def load_templates(template_file: TemplateFile) -> List[TemplateEntry]:
    """Read `template_file` and return the templates it defines.

    Raises `OSError` if the file cannot be read, and `TemplateParseError` if
    it is not UTF-8 or not parseable.
    """
    try:
        with open(template_file.path, encoding="utf-8", newline="") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise TemplateParseError(f"file is not valid UTF-8: {e}") from None
    return extract_templates(text, filename=template_file.basename)
