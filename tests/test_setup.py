# SPDX-FileCopyrightText: 2021 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

import runpy
from pathlib import Path

import pytest
from setuptools.command.build_py import build_py
from setuptools.dist import Distribution

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def build_cmd(monkeypatch, tmp_path):
    setup_ns = runpy.run_path(str(ROOT / "setup.py"), run_name="setup")
    # Only the template step is under test.
    monkeypatch.setattr(build_py, "run", lambda self: None)
    monkeypatch.chdir(ROOT)

    announced = []
    cmd_class = setup_ns["PrecompiledJinja"]
    monkeypatch.setattr(
        cmd_class,
        "announce",
        lambda self, msg, level=1: announced.append((msg, level)),
    )
    cmd = cmd_class(Distribution())
    cmd.build_lib = str(tmp_path)
    return cmd, announced


def test_template_compilation_is_announced(build_cmd, tmp_path):
    cmd, announced = build_cmd

    cmd.run()

    compiled_dir = tmp_path / "ytcompile" / "templates" / "compiled"
    assert announced == [
        (f"compiling jinja templates into {compiled_dir}/", 2)
    ]
    assert [p.suffix for p in compiled_dir.iterdir()] == [".py"]


def test_dry_run_compiles_nothing(build_cmd, tmp_path):
    cmd, announced = build_cmd
    cmd.dry_run = True

    cmd.run()

    assert len(announced) == 1
    assert not (tmp_path / "ytcompile").exists()
