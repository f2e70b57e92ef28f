"""Pytest configuration and shared fixtures for unityfilter tests.

Provides an auto-use fixture that clears UNITYFILTER_* variables so the
developer's environment never changes test outcomes, plus a fake 7z
executable that gzips with Python's gzip module.
"""

import os
import stat
import sys
import textwrap

import pytest


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Auto-use fixture removing UNITYFILTER_* environment variables for each test."""
    for key in list(os.environ):
        if key.startswith('UNITYFILTER_'):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def fake_seven_zip(tmp_path):
    """Path to a 7z stand-in supporting `a|x -si -so -an -tgzip`.

    Arguments are appended to a log file next to the script so tests can
    check how it was invoked.
    """
    script = tmp_path / 'fake7z'
    log_path = tmp_path / 'fake7z.log'
    script.write_text(
        textwrap.dedent(
            f"""\
            #!{sys.executable}
            import gzip
            import sys

            with open({str(log_path)!r}, 'a') as log:
                log.write(' '.join(sys.argv[1:]) + '\\n')

            data = sys.stdin.buffer.read()
            if sys.argv[1] == 'a':
                sys.stdout.buffer.write(gzip.compress(data, mtime=0))
            elif sys.argv[1] == 'x':
                sys.stdout.buffer.write(gzip.decompress(data))
            else:
                sys.exit(2)
            """
        )
    )
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


@pytest.fixture
def failing_seven_zip(tmp_path):
    """Path to a 7z stand-in that reads its input and exits with status 3."""
    script = tmp_path / 'broken7z'
    script.write_text(f'#!{sys.executable}\nimport sys\nsys.stdin.buffer.read()\nsys.exit(3)\n')
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return str(script)
