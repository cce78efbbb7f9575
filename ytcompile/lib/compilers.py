# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Precompilers for each template family.

A precompiler turns template source into the JavaScript source of a render
function.  Which one is used depends only on the template file's extension.
"""
from __future__ import annotations

import logging
import os
import re
import shlex
import subprocess
from typing import (
    TYPE_CHECKING,
    Callable,
    ClassVar,
    Dict,
    Iterable,
    List,
    Mapping,
    Tuple,
)

from ytcompile.lib.extract import TemplateEntry
from ytcompile.lib.sources import HANDLEBARS, MICRO
from ytcompile.lib.validation import (
    CompilerUnavailableError,
    TemplateCompileError,
)

if TYPE_CHECKING:
    from typing_extensions import Final

log = logging.getLogger("ytcompile.compilers")

HANDLEBARS_ENV_VAR: Final = "YTCOMPILE_HANDLEBARS"


def default_handlebars_command() -> str:
    """Return the Handlebars command, which the environment may override."""
    return os.environ.get(HANDLEBARS_ENV_VAR) or "handlebars"


class TemplateCompiler:
    """Turns template source into source code for a render function."""

    family: ClassVar[str]

    def precompile(self, source: str) -> str:
        """Return JavaScript source for `source` compiled to a function.

        Raises `TemplateCompileError` if `source` is rejected.
        """
        raise NotImplementedError


class HandlebarsCompiler(TemplateCompiler):
    """Precompile with the `handlebars` program from the npm package.

    `--simple` mode prints exactly what `Handlebars.precompile()` returns.
    """

    family = HANDLEBARS

    def __init__(self, command: str = "handlebars") -> None:
        self.command = command

    def precompile(self, source: str) -> str:  # noqa: D102
        # "-" reads the template from stdin.
        argv = [*shlex.split(self.command), "--simple", "--string", "-"]
        log.debug(f"running {argv}")
        try:
            proc = subprocess.run(
                argv,
                input=source,
                capture_output=True,
                encoding="utf-8",
                check=False,
            )
        except OSError as e:
            raise CompilerUnavailableError(
                f"could not run Handlebars precompiler '{self.command}': {e.strerror or e}"
            ) from None
        if proc.returncode != 0:
            message = proc.stderr.strip().splitlines()
            raise TemplateCompileError(
                "Handlebars precompiler failed: "
                + (message[0] if message else f"exit status {proc.returncode}")
            )
        # Only the trailing newline is added by the program.
        out = proc.stdout
        if out.endswith("\n"):
            out = out[:-1]
        return out


# Same patterns as `Y.Template.Micro.options`.
_RAW_OUTPUT: Final = re.compile(r"<%==([\s\S]+?)%>")
_ESCAPED_OUTPUT: Final = re.compile(r"<%=([\s\S]+?)%>")
_CODE: Final = re.compile(r"<%([\s\S]+?)%>")
_STRING_ESCAPE: Final = re.compile("\\\\|'|\r|\n|\t|\u2028|\u2029")
_STRING_REPLACE: Final = {
    "\\": "\\\\",
    "'": "\\'",
    "\r": "\\r",
    "\n": "\\n",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

# Placeholders for compiled blocks while the literal text is escaped.
_TOKEN_OPEN: Final = "\ufffe"
_TOKEN_CLOSE: Final = "\uffff"
_TOKEN_CHARS: Final = re.compile(f"[{_TOKEN_OPEN}{_TOKEN_CLOSE}]")
_TOKEN: Final = re.compile(f"{_TOKEN_OPEN}([0-9]+){_TOKEN_CLOSE}")
_EMPTY_APPEND: Final = re.compile(r"\n\$t\+='';\n")

_MICRO_PREAMBLE: Final = (
    "var $b='', $v=function (v){return v || v === 0 ? v : $b;}, $t='"
)


class MicroCompiler(TemplateCompiler):
    """Precompile ERB-style `Y.Template.Micro` templates.

    `<%= expr %>` outputs HTML-escaped, `<%== expr %>` outputs raw, and
    `<% code %>` runs arbitrary code.  The output is the same as
    `Y.Template.Micro.precompile()`.
    """

    family = MICRO

    def precompile(self, source: str) -> str:  # noqa: D102
        blocks: List[str] = []

        def stash(
            prefix: str, suffix: str
        ) -> Callable[[re.Match[str]], str]:
            def replace(match: re.Match[str]) -> str:
                blocks.append(prefix + match.group(1) + suffix)
                return f"{_TOKEN_OPEN}{len(blocks) - 1}{_TOKEN_CLOSE}"

            return replace

        text = _TOKEN_CHARS.sub("", source)
        # Order matters: "<%==" would otherwise match as "<%=".
        text = _RAW_OUTPUT.sub(stash("'+\n$v(", ")+\n'"), text)
        text = _ESCAPED_OUTPUT.sub(stash("'+\n$e($v(", "))+\n'"), text)
        text = _CODE.sub(stash("';\n", "\n$t+='"), text)
        text = _STRING_ESCAPE.sub(lambda m: _STRING_REPLACE[m.group()], text)
        text = _TOKEN.sub(lambda m: blocks[int(m.group(1))], text)
        text = _EMPTY_APPEND.sub("\n", text)

        body = _MICRO_PREAMBLE + text + "';\nreturn $t;"
        return "function (Y, $e, data) {\n" + body + "\n}"


def get_compilers(
    handlebars_command: str = "handlebars",
) -> Dict[str, TemplateCompiler]:
    """Return a precompiler for each template family."""
    return {
        HANDLEBARS: HandlebarsCompiler(handlebars_command),
        MICRO: MicroCompiler(),
    }


def compile_templates(
    entries: Iterable[TemplateEntry],
    family: str,
    compilers: Mapping[str, TemplateCompiler],
) -> List[Tuple[str, str]]:
    """Compile every entry with the precompiler for `family`.

    Returns `(name, compiled)` pairs in the same order.  The first rejected
    entry raises `TemplateCompileError`, so a file either compiles completely
    or not at all.
    """
    try:
        compiler = compilers[family]
    except KeyError:
        raise TemplateCompileError(
            f"no precompiler for '{family}' templates"
        ) from None
    compiled = []
    for entry in entries:
        try:
            compiled.append((entry.name, compiler.precompile(entry.source)))
        except CompilerUnavailableError:
            raise
        except TemplateCompileError as e:
            raise TemplateCompileError(
                f"template '{entry.name}': {e}"
            ) from None
    return compiled
