# noqa: D100
# SPDX-FileCopyrightText: 2020 Gabriel Lisaca <gabriel.lisaca@gmail.com>
# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

import os

from jinja2 import FileSystemLoader
from setuptools import find_packages, setup
from setuptools.command.build_py import build_py


def compile_templates(path):
    """Pre-compile Jinja2 templates for faster runtime execution."""
    # Import lazily: the package itself isn't importable until it's built.
    from ytcompile.lib.module import get_env

    env = get_env()
    env.loader = FileSystemLoader("ytcompile/templates")
    env.compile_templates(path, zip=None)


class PrecompiledJinja(build_py):
    """Compile Jinja2 templates while building.

    Parsing templates on every call is too slow.
    """

    def run(self):  # noqa: D102
        super().run()
        templates_dir = os.path.join(
            self.build_lib, "ytcompile/templates/compiled/"
        )
        self.announce(
            f"compiling jinja templates into {templates_dir}", level=2
        )
        # --dry-run doesn't propagate to build_py if called on build.
        if not self.dry_run:
            compile_templates(templates_dir)


if __name__ == "__main__":
    setup(
        name="ytcompile",
        version="0.1.0",
        description="Precompile Handlebars and Micro templates into YUI modules",
        license="Apache-2.0",
        packages=find_packages(exclude=["tests", "tests.*"]),
        package_data={"ytcompile": ["templates/*.in"]},
        python_requires=">=3.8",
        install_requires=["Jinja2>=3.0", "lxml>=4.6"],
        extras_require={"test": ["pytest>=6", "setuptools>=61"]},
        entry_points={
            "console_scripts": ["ytcompile = ytcompile.precompile:main"]
        },
        cmdclass={"build_py": PrecompiledJinja},
    )
