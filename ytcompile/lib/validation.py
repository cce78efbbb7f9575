# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Validators for option arguments, and the exceptions used throughout.

All validators should raise `OptionParseError` on invalid input.
"""
from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing_extensions import Final


class OptionParseError(Exception):
    """Exception when options are given incorrect arguments."""


class TemplateError(Exception):
    """Base exception for failures confined to a single template file."""


class TemplateParseError(TemplateError):
    """Exception when a template file cannot be read as markup."""


class TemplateCompileError(TemplateError):
    """Exception when a precompiler rejects a template's source."""


class CompilerUnavailableError(TemplateCompileError):
    """Exception when a precompiler program cannot be run at all."""


# DIRECTORIES


def validate_directory(path: str) -> str:
    """Return the normalised form of `path` if it is an existing directory.

    Raises `OptionParseError` on invalid input.
    """
    if not path:
        raise OptionParseError("directory must not be empty")
    if not os.path.exists(path):
        raise OptionParseError(f'"{path}" does not exist')
    if not os.path.isdir(path):
        raise OptionParseError(f'"{path}" is not a directory')
    return os.path.normpath(path)


# NAMESPACE

# Each part becomes a property access on `Y` in the generated module, so it
# must be an identifier.
_VALID_NAMESPACE_STR: Final = r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$"
_VALID_NAMESPACE: Final = re.compile(_VALID_NAMESPACE_STR, re.ASCII)


def validate_namespace(namespace: str) -> str:
    """Return `namespace` unchanged if it is a dotted path of JS identifiers.

    Raises `OptionParseError` on invalid input.
    """
    if not _VALID_NAMESPACE.fullmatch(namespace):
        raise OptionParseError(
            f"namespace '{namespace}' must be a dot-separated list of identifiers (e.g., 'U1.Templates')"
        )
    return namespace
