# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Precompile Y.Template templates into modules ready for packaging.

Each Handlebars (.hbs, .handlebars) or Micro (.mu, .micro) file in the input
directory becomes a module of the same name (plus '.js') in the output
directory, mapping each of its <script> templates to a compiled function.

Exit codes are taken from the `sysexits.h` file.
"""

from __future__ import annotations

import argparse
import logging
from os import EX_DATAERR, EX_OK, EX_OSERR, EX_UNAVAILABLE
from typing import TYPE_CHECKING, List, Mapping, Optional

from jinja2 import Environment

from ytcompile.lib.common import (
    BASE_PARSER,
    ExecContext,
    convert_system_exit_to_return,
    setup_cli,
    wrap_parser,
)
from ytcompile.lib.compilers import (
    HANDLEBARS_ENV_VAR,
    TemplateCompiler,
    compile_templates,
    default_handlebars_command,
    get_compilers,
)
from ytcompile.lib.extract import load_templates
from ytcompile.lib.module import DEFAULT_NAMESPACE, TemplateModule, get_env
from ytcompile.lib.sources import TemplateFile, select_template_files
from ytcompile.lib.validation import (
    CompilerUnavailableError,
    TemplateCompileError,
    TemplateParseError,
    validate_directory,
    validate_namespace,
)

if TYPE_CHECKING:
    from typing_extensions import Final

PROGRAM_NAME: Final = "ytcompile"


def _get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        PROGRAM_NAME,
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[BASE_PARSER],
    )
    parser.add_argument(
        "--input-dir",
        "-i",
        required=True,
        type=wrap_parser(validate_directory),
        metavar="DIR",
        help="source template file directory",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        required=True,
        type=wrap_parser(validate_directory),
        metavar="DIR",
        help="directory to write precompiled template files",
    )
    parser.add_argument(
        "--namespace",
        "-n",
        default=DEFAULT_NAMESPACE,
        type=wrap_parser(validate_namespace),
        help=f"namespace on Y to add the templates; default is Y.{DEFAULT_NAMESPACE}",
    )
    parser.add_argument(
        "--handlebars",
        metavar="COMMAND",
        default=default_handlebars_command(),
        help=f"command to run the Handlebars precompiler; default is ${HANDLEBARS_ENV_VAR} or 'handlebars'",
    )
    return parser


class _PrecompileContext(ExecContext):
    def __init__(self) -> None:
        super().__init__()
        self.input_dir: str = ""
        self.output_dir: str = ""
        # Left unset so that argparse fills in the option defaults.
        self.namespace: str
        self.handlebars: str


def precompile_file(
    template_file: TemplateFile,
    ctx: _PrecompileContext,
    compilers: Mapping[str, TemplateCompiler],
    env: Optional[Environment] = None,
) -> str:
    """Compile every template in `template_file` and write its module.

    Returns the path of the written module.  Nothing is written unless every
    template compiles.
    """
    log = logging.getLogger(f"{PROGRAM_NAME}.precompile")
    entries = load_templates(template_file)
    if not entries:
        log.warning(f"{template_file.basename}: no templates found")

    module = TemplateModule(
        template_file.basename,
        namespace=ctx.namespace,
        generator=PROGRAM_NAME,
        env=env,
    )
    module.extend(compile_templates(entries, template_file.family, compilers))
    return module.write(module.get_template_vars(), ctx.output_dir)


def _precompile_and_report(
    template_file: TemplateFile,
    ctx: _PrecompileContext,
    compilers: Mapping[str, TemplateCompiler],
    env: Environment,
    log: logging.Logger,
) -> int:
    """Return the exit code for one file, logging any failure."""
    name = template_file.basename
    try:
        outfile = precompile_file(template_file, ctx, compilers, env)
    except TemplateParseError as e:
        log.critical(f"{name}: {e}")
        return EX_DATAERR
    except CompilerUnavailableError as e:
        log.critical(f"{name}: {e}")
        return EX_UNAVAILABLE
    except TemplateCompileError as e:
        log.critical(f"{name}: {e}")
        return EX_DATAERR
    except OSError as e:
        # Don't delete tempfile to allow for inspection on write errors.
        log.critical(f"{name}: {e}")
        return EX_OSERR
    log.info(f"Templates precompiled to: {outfile}")
    return EX_OK


@convert_system_exit_to_return
def main(argv: Optional[List[str]] = None) -> int:  # noqa: D103
    # Docstring is copied from the module.
    ctx, log = setup_cli(
        PROGRAM_NAME, argv, _get_parser(), _PrecompileContext()
    )

    try:
        template_files = select_template_files(ctx.input_dir)
    except OSError as e:
        log.critical(f"{e}")
        return EX_OSERR
    if not template_files:
        log.info(f"no template files found in {ctx.input_dir}")
        return EX_OK

    compilers = get_compilers(ctx.handlebars)
    env = get_env()
    # Every file is attempted.  Report the first failure.
    exit_code = EX_OK
    for template_file in template_files:
        file_exit_code = _precompile_and_report(
            template_file, ctx, compilers, env, log
        )
        if exit_code == EX_OK:
            exit_code = file_exit_code
    return exit_code


main.__doc__ = __doc__
