# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

import json
import logging
import subprocess

import pytest

from ytcompile.lib.compilers import HANDLEBARS_ENV_VAR


@pytest.fixture(autouse=True)
def no_handlebars_env(monkeypatch):
    monkeypatch.delenv(HANDLEBARS_ENV_VAR, raising=False)


@pytest.fixture
def input_dir(tmp_path):
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path):
    path = tmp_path / "build"
    path.mkdir()
    return path


@pytest.fixture
def cli_dirs(input_dir, output_dir):
    return ["--input-dir", str(input_dir), "--output-dir", str(output_dir)]


@pytest.fixture
def hello_template():
    return '<script id="hello" type="x-template">Hello {{planet}}!</script>\n'


@pytest.fixture
def fake_handlebars(monkeypatch):
    """Stand in for the `handlebars` program.

    It "compiles" a template to `FAKE("<source>")` and rejects any source
    containing "{{#broken".  Returns the list of `(argv, source)` calls.
    """
    calls = []

    def run(argv, *, input, **kwargs):
        calls.append((argv, input))
        if "{{#broken" in input:
            return subprocess.CompletedProcess(
                argv,
                1,
                stdout="",
                stderr="Error: Parse error on line 1:\n{{#broken\n",
            )
        return subprocess.CompletedProcess(
            argv, 0, stdout=f"FAKE({json.dumps(input)})\n", stderr=""
        )

    monkeypatch.setattr("ytcompile.lib.compilers.subprocess.run", run)
    return calls


@pytest.fixture
def caplog_cli_error(caplog):
    caplog.set_level(logging.CRITICAL)
    return caplog
