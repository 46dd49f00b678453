import io

import pytest

from pipeshell import Shell


class Streams:
    def __init__(self, stdin: str = ""):
        self.stdin = io.StringIO(stdin)
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()


@pytest.fixture
def streams():
    return Streams()


@pytest.fixture
def shell(streams):
    sh = Shell(stdin=streams.stdin, stdout=streams.stdout, stderr=streams.stderr)
    yield sh
    sh.close()
