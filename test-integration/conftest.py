"""Fixtures for npm_utils integration tests."""

import json
import sys
import tempfile
from pathlib import Path

import pytest

# Stand-in for the package manager. It prints its arguments as one JSON line
# and then executes the script body from package.json as Python code.
FAKE_NPM = '''
import json
import os
import sys
import time

args = sys.argv[1:]
name = args[-1]
with open("package.json", encoding="utf-8") as f:
    scripts = json.load(f).get("scripts", {})
print(json.dumps(args), flush=True)
if name not in scripts:
    sys.stderr.write(f"Missing script: {name}\\n")
    sys.exit(1)
exec(scripts[name])
'''

SCRIPTS = {
    "clean": "pass",
    "build": "pass",
    "build:compile": "pass",
    "build:schema": "pass",
    "build:schema:a": "pass",
    "build:schema:b": "pass",
    "test:unit": "pass",
    "test:lint": "pass",
    "test:spell": "pass",
    "error:a": "sys.exit(1)",
    "error:b": "sys.exit(3)",
    "color": "print(os.environ.get('FORCE_COLOR'), flush=True)",
    "slow": "print('slow-1', flush=True); time.sleep(1); print('slow-2', flush=True)",
    "quick:a": "print('a-1', flush=True); print('a-2', flush=True)",
    "quick:b": "sys.stderr.write('b-err\\n'); sys.stderr.flush(); print('b-1', flush=True)",
    "killed": "import signal; os.kill(os.getpid(), signal.SIGKILL)",
}


def write_package(directory: Path, scripts: dict | None = None) -> Path:
    path = directory / "package.json"
    path.write_text(json.dumps({"name": "fixture", "scripts": SCRIPTS if scripts is None else scripts}))
    return path


@pytest.fixture
def package_dir(monkeypatch):
    """Temporary package with scripts and a fake package manager, used as cwd."""
    with tempfile.TemporaryDirectory() as tmpdir:
        directory = Path(tmpdir).resolve()
        write_package(directory)
        npm = directory / "npm-cli.js"
        npm.write_text(FAKE_NPM)

        monkeypatch.chdir(directory)
        monkeypatch.setenv("npm_execpath", str(npm))
        monkeypatch.setenv("npm_node_execpath", sys.executable)
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.delenv("NO_COLOR", raising=False)
        yield directory


def output_lines(text: str) -> list:
    return [line for line in text.splitlines() if line]


def invocations(text: str) -> list:
    """Argument lists printed by the fake package manager."""
    return [json.loads(line) for line in output_lines(text) if line.startswith("[")]
