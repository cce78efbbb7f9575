# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ytcompile")
except PackageNotFoundError:
    # Running from a source checkout.
    __version__ = "unknown"
