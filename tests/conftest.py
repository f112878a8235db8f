"""Shared test fixtures: canned svn output and a recording stub runner."""

from __future__ import annotations

import textwrap
from typing import List, Optional, Sequence, Tuple, Union

import pytest

from svnview.svn.gateway import RepositoryGateway
from svnview.svn.runner import CommandResult, CommandRunner

REPO = "file:///srv/svn/project"


class StubRunner(CommandRunner):
    """CommandRunner that records calls and replays canned results.

    Responses are matched by argument prefix (and optionally by the last
    argument, the target); the first registered match wins.
    """

    def __init__(self) -> None:
        super().__init__("svn")
        self.calls: List[List[str]] = []
        self._responses: List[Tuple[Tuple[str, ...], Optional[str], object]] = []

    def when(
        self,
        *prefix: str,
        target: Optional[str] = None,
        exit_code: int = 0,
        stdout: Union[str, bytes] = "",
        stderr: str = "",
        raises: Optional[Exception] = None,
    ) -> "StubRunner":
        if isinstance(stdout, str):
            stdout = stdout.encode("utf-8")
        outcome = raises if raises is not None else CommandResult(exit_code, stdout, stderr)
        self._responses.append((prefix, target, outcome))
        return self

    def execute(self, args: Sequence[str]) -> CommandResult:
        args = list(args)
        self.calls.append(args)
        for prefix, target, outcome in self._responses:
            if tuple(args[: len(prefix)]) != prefix:
                continue
            if target is not None and args[-1] != target:
                continue
            if isinstance(outcome, Exception):
                raise outcome
            return CommandResult(outcome.exit_code, outcome.stdout, outcome.stderr, tuple(args))
        return CommandResult(1, b"", "svn: E000000: not stubbed", tuple(args))

    def subcommands(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def runner() -> StubRunner:
    return StubRunner()


@pytest.fixture
def gateway(runner: StubRunner) -> RepositoryGateway:
    return RepositoryGateway(REPO, runner=runner)


@pytest.fixture
def unloaded(runner: StubRunner) -> RepositoryGateway:
    return RepositoryGateway(runner=runner)


# ── svn info --xml ────────────────────────────────────────────────────────────


@pytest.fixture
def info_dir_xml() -> str:
    return textwrap.dedent("""\
        <?xml version="1.0" encoding="UTF-8"?>
        <info>
        <entry kind="dir" path="trunk" revision="42">
        <url>file:///srv/svn/project/trunk</url>
        <relative-url>^/trunk</relative-url>
        </entry>
        </info>
    """)


@pytest.fixture
def info_file_xml() -> str:
    return textwrap.dedent("""\
        <?xml version="1.0" encoding="UTF-8"?>
        <info>
        <entry kind="file" path="README.txt" revision="42">
        <url>file:///srv/svn/project/trunk/README.txt</url>
        </entry>
        </info>
    """)


@pytest.fixture
def info_empty_xml() -> str:
    """What svn prints when the target does not exist at that revision."""
    return '<?xml version="1.0" encoding="UTF-8"?>\n<info>\n</info>\n'


# ── svn ls --xml ──────────────────────────────────────────────────────────────


@pytest.fixture
def ls_trunk_xml() -> str:
    """Two files and one directory."""
    return textwrap.dedent("""\
        <?xml version="1.0" encoding="UTF-8"?>
        <lists>
        <list path="file:///srv/svn/project/trunk">
        <entry kind="file">
        <name>README.txt</name>
        <size>1024</size>
        <commit revision="40">
        <author>alice</author>
        <date>2012-05-10T14:33:12.123456Z</date>
        </commit>
        </entry>
        <entry kind="dir">
        <name>src</name>
        <commit revision="42">
        <author>bob</author>
        <date>2012-05-11T09:00:00.000000Z</date>
        </commit>
        </entry>
        <entry kind="file">
        <name>setup.py</name>
        <size>88</size>
        <commit revision="41">
        <author>alice</author>
        <date>2012-05-10T23:59:59.000000-02:00</date>
        </commit>
        </entry>
        </list>
        </lists>
    """)


# ── svn log --xml ─────────────────────────────────────────────────────────────


def log_entry_xml(revision: int, author: str = "alice", msg: str = "Change") -> str:
    return (
        f'<logentry revision="{revision}">\n'
        f"<author>{author}</author>\n"
        f"<date>2012-05-10T14:33:12.123456Z</date>\n"
        f"<paths>\n"
        f'<path action="M" kind="file" text-mods="true" prop-mods="false">/trunk/hello.c</path>\n'
        f"</paths>\n"
        f"<msg>{msg}</msg>\n"
        f"</logentry>\n"
    )


def log_xml(*entries: str) -> str:
    return '<?xml version="1.0" encoding="UTF-8"?>\n<log>\n' + "".join(entries) + "</log>\n"


@pytest.fixture
def log_42_xml() -> str:
    return log_xml(log_entry_xml(42, msg="Fix greeting\n\nUse the proper salutation.\n"))


# ── svn diff ──────────────────────────────────────────────────────────────────


@pytest.fixture
def diff_42() -> str:
    return (
        "Index: trunk/hello.c\n"
        "===================================================================\n"
        "--- trunk/hello.c\t(revision 41)\n"
        "+++ trunk/hello.c\t(revision 42)\n"
        "@@ -1,4 +1,5 @@\n"
        " #include <stdio.h>\n"
        "-int main() {\n"
        '-    printf("hi\\n");\n'
        "+int main(void) {\n"
        '+    printf("hello\\n");\n'
        "+    return 0;\n"
        " }\n"
    )


@pytest.fixture
def diff_multi() -> str:
    """Added file, binary file, deleted file, then a property block."""
    return (
        "Index: trunk/a.txt\n"
        "===================================================================\n"
        "--- trunk/a.txt\t(nonexistent)\n"
        "+++ trunk/a.txt\t(revision 43)\n"
        "@@ -0,0 +1,2 @@\n"
        "+one\n"
        "+two\n"
        "Index: trunk/logo.png\n"
        "===================================================================\n"
        "Cannot display: file marked as a binary type.\n"
        "svn:mime-type = application/octet-stream\n"
        "Index: trunk/old.txt\n"
        "===================================================================\n"
        "--- trunk/old.txt\t(revision 42)\n"
        "+++ trunk/old.txt\t(nonexistent)\n"
        "@@ -1,3 +0,0 @@\n"
        "-x\n"
        "-y\n"
        "-z\n"
        "\n"
        "Property changes on: trunk/a.txt\n"
        "___________________________________________________________________\n"
        "Added: svn:eol-style\n"
        "## -0,0 +1 ##\n"
        "+native\n"
        "\\ No newline at end of property\n"
    )
