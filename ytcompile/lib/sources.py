# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Select template source files from a directory."""
from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Dict, List, NamedTuple

if TYPE_CHECKING:
    from typing_extensions import Final

log = logging.getLogger("ytcompile.sources")

HANDLEBARS: Final = "handlebars"
MICRO: Final = "micro"

# Extension (with the leading dot) -> template family.
FAMILIES: Final[Dict[str, str]] = {
    ".hbs": HANDLEBARS,
    ".handlebars": HANDLEBARS,
    ".mu": MICRO,
    ".micro": MICRO,
}


class TemplateFile(NamedTuple):
    """A template source file whose family decides how it is compiled."""

    path: str
    extension: str

    @property
    def family(self) -> str:
        return FAMILIES[self.extension]

    @property
    def basename(self) -> str:
        return os.path.basename(self.path)


def select_template_files(input_dir: str) -> List[TemplateFile]:
    """Return the template files directly inside `input_dir`.

    Subdirectories are not descended into.  The result is sorted by file name.
    """
    selected = []
    with os.scandir(input_dir) as it:
        for entry in it:
            _, ext = os.path.splitext(entry.name)
            if ext not in FAMILIES:
                log.debug(f"ignoring '{entry.name}': not a template file")
                continue
            # Follows symlinks, like `stat`.
            if not entry.is_file():
                log.debug(f"ignoring '{entry.name}': not a regular file")
                continue
            selected.append(
                TemplateFile(os.path.join(input_dir, entry.name), ext)
            )
    selected.sort(key=lambda f: f.basename)
    return selected
