# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Provides a class that allows treating generated template modules as objects."""
from __future__ import annotations

import argparse
import json
import os
from tempfile import NamedTemporaryFile
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    Mapping,
    Optional,
    Tuple,
)

if TYPE_CHECKING:
    from typing_extensions import Final

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, ModuleLoader

DEFAULT_NAMESPACE: Final = "Templates"
MODULE_TEMPLATE: Final = "module.js.in"
MODULE_SUFFIX: Final = ".js"


def _jinja_jsstring(value: str) -> str:
    """Return `value` as a double-quoted JavaScript string literal."""
    return json.dumps(value)


def get_env() -> Environment:
    """Return the Jinja2 environment used to render modules."""
    # This package should not run from an archive--it's too slow to decompress every time.
    # Thus, `__file__` is guaranteed to be defined.
    package_dir = os.path.dirname(os.path.dirname(__file__))
    raw_templates_dir = os.path.join(package_dir, "templates")
    precompiled_templates_dir = os.path.join(raw_templates_dir, "compiled")
    env = Environment(
        loader=ChoiceLoader(
            [
                ModuleLoader(precompiled_templates_dir),
                # Don't use `PackageLoader`: it needs the package to be importable as a resource.
                FileSystemLoader(raw_templates_dir),
            ]
        ),
        # Only one template to load.
        cache_size=1,
        trim_blocks=True,
        lstrip_blocks=True,
        # The footer ends with a newline.
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["jsstring"] = _jinja_jsstring
    return env


class TemplateModule(argparse.Namespace):
    """Object representation for a module of precompiled templates.

    Add compiled templates with `add(...)`, call `get_template_vars(...)` to
    get a dict of Jinja2 template variables, and then pass it to `write(...)`.

    Templates are kept in insertion order.  Adding a name twice replaces the
    earlier function but keeps its position.
    """

    def __init__(
        self,
        name: str,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        generator: str = "ytcompile",
        env: Optional[Environment] = None,
    ) -> None:
        self.name = name
        self.namespace = namespace
        self.generator: Final = generator
        self.templates: Dict[str, str] = {}
        self.env = env or get_env()

    @property
    def filename(self) -> str:
        """Name of the output file, e.g. 'greeting.hbs.js'."""
        return self.name + MODULE_SUFFIX

    def add(self, name: str, compiled: str) -> None:
        """Add a compiled template function under `name`."""
        self.templates[name] = compiled

    def extend(self, compiled: Iterable[Tuple[str, str]]) -> None:
        """Add `(name, compiled)` pairs in order."""
        for name, fragment in compiled:
            self.add(name, fragment)

    def get_template_vars(self) -> Dict[str, Any]:
        """Get a dict of variables to be used in the Jinja2 template."""
        return {
            "templates": list(self.templates.items()),
            "namespace": self.namespace,
        }

    def write(
        self, template_vars: Mapping[str, Any], output_dir: str
    ) -> str:
        """Write the module into `output_dir`, returning its path.

        It does an atomic write (using a temporary file) that replaces any
        existing module of the same name.  If this atomic write fails, a file
        with the pattern `"NAME.RANDOMSTRING.GENERATORNAME.tmp"` should
        remain, available for inspection.
        """
        template = self.env.get_template(MODULE_TEMPLATE)
        outfile = os.path.join(output_dir, self.filename)
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            delete=False,
            prefix=f"{self.name}.",
            suffix=f".{self.generator}.tmp",
            dir=output_dir,
        ) as f:
            template.stream(template_vars).dump(f)
            f.flush()
            fd = f.fileno()
            os.fsync(fd)
            os.fchmod(fd, 0o644)
            os.replace(f.name, outfile)
        return outfile
