"""Verify CLI modules expose main() and prebuild-scheduler --help works."""

from __future__ import annotations

import subprocess
import sys
from importlib import import_module

import pytest

_CLI_MODULES = [
    "prebuild_scheduler.cli.schedule",
    "prebuild_scheduler.cli.init_db",
    "prebuild_scheduler.cli.validate_catalog",
    "prebuild_scheduler.cli.refresh_runtime_versions",
    "prebuild_scheduler.cli.oldest_unbuilt",
]


@pytest.mark.parametrize("module_name", _CLI_MODULES)
def test_cli_module_has_main(module_name):
    mod = import_module(module_name)
    assert hasattr(mod, "main"), f"{module_name} missing main()"
    assert callable(mod.main), f"{module_name}.main not callable"


def test_cli_main_help_exits_zero():
    """cli.main.main(["--help"]) exits with 0 (in-process)."""
    from prebuild_scheduler.cli.main import main

    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])
    assert exc_info.value.code == 0


def test_module_help_exits_zero():
    """python -m prebuild_scheduler --help exits 0 and lists commands (subprocess)."""
    r = subprocess.run(
        [sys.executable, "-m", "prebuild_scheduler", "--help"],
        capture_output=True,
        text=True,
        timeout=10,
    )
    assert r.returncode == 0, (r.stdout or "") + (r.stderr or "")
    out = (r.stdout or "") + (r.stderr or "")
    assert "schedule" in out, "Help output should list 'schedule' command"
