"""Fixtures for CLI integration tests: a stand-in evaluator executable"""

import stat
import sys

import pytest


FAKE_EVALUATOR = f"""\
#!{sys.executable}
import json
import sys

args = sys.argv[1:]
if "--json" not in args:
    source = open(args[-1]).read()
    print("<LAMBDA>" if ":" in source else source.strip())
elif "-E" in args:
    print(json.dumps({{"applied": args[-1].startswith("import ")}}))
elif "fail" in open(args[-1]).read():
    print("error: evaluation aborted", file=sys.stderr)
    sys.exit(1)
else:
    print(json.dumps(open(args[-1]).read().strip()))
"""


@pytest.fixture(name="fake_nix")
def fake_nix_fixture(tmp_path):
    """Executable answering like nix-instantiate: echoes sources as JSON strings."""
    path = tmp_path / "fake-nix-instantiate"
    path.write_text(FAKE_EVALUATOR)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path
