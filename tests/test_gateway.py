"""Tests for the repository gateway, driven entirely through a stub runner."""

from pathlib import Path

import pytest

from svnview.svn.gateway import (
    RepositoryGateway,
    normalize_path,
    parent_of,
    sanitize_revision,
)
from svnview.svn.models import ErrorKind, TreeDir, TreeFile, TreeInvalid, TreeOther
from svnview.svn.runner import SvnNotInstalledError, SvnTimeoutError

from conftest import REPO, log_entry_xml, log_xml


class TestUnloaded:
    @pytest.mark.parametrize(
        "call",
        [
            lambda g: g.branches(),
            lambda g: g.has_tree("HEAD"),
            lambda g: g.has_tree("12"),
            lambda g: g.tree("HEAD", "/trunk", "HEAD"),
            lambda g: g.show("/trunk/README.txt"),
            lambda g: g.log(),
            lambda g: g.show_commit("42"),
            lambda g: g.diff("42"),
            lambda g: g.blame("HEAD", "/trunk/README.txt"),
            lambda g: g.execute(["info"]),
        ],
    )
    def test_every_operation_not_loaded(self, unloaded, runner, call):
        result = call(unloaded)
        assert result.error is ErrorKind.NOT_LOADED
        assert result.value is None
        assert runner.calls == []

    def test_loaded_flag(self, unloaded, gateway):
        assert unloaded.loaded is False
        assert gateway.loaded is True
        assert gateway.location == REPO


class TestOpen:
    def test_directory(self, tmp_path: Path):
        result = RepositoryGateway.open(str(tmp_path))
        assert result.ok
        assert result.value.location == tmp_path.resolve().as_uri()

    def test_file_uri(self):
        result = RepositoryGateway.open("file:///srv/svn/project/")
        assert result.ok
        assert result.value.location == "file:///srv/svn/project"

    def test_missing_directory(self, tmp_path: Path):
        result = RepositoryGateway.open(str(tmp_path / "nope"))
        assert result.error is ErrorKind.NOT_FOUND

    def test_location_is_read_only(self, gateway):
        with pytest.raises(AttributeError):
            gateway.location = "file:///elsewhere"


class TestHelpers:
    @pytest.mark.parametrize(
        "given, expected",
        [("HEAD", "HEAD"), ("42", "42"), (42, "42"), ("0", "0"), (None, "HEAD"),
         ("head", "HEAD"), ("-1", "HEAD"), ("42; rm -rf /", "HEAD"), ("{2012-01-01}", "HEAD")],
    )
    def test_sanitize_revision(self, given, expected):
        assert sanitize_revision(given) == expected

    @pytest.mark.parametrize(
        "given, expected", [("42", "41"), (1, "0"), ("0", "0"), ("HEAD", "HEAD")]
    )
    def test_parent_of(self, given, expected):
        assert parent_of(given) == expected

    @pytest.mark.parametrize(
        "given, expected",
        [("", ""), ("/", ""), ("/trunk", "/trunk"), ("/trunk/", "/trunk"),
         ("trunk", "/trunk"), ("/trunk//", "/trunk/")],
    )
    def test_normalize_path(self, given, expected):
        assert normalize_path(given) == expected


class TestBranches:
    def test_branches_then_trunk(self, gateway, runner):
        runner.when("ls", stdout="feature-x/\nrel-1.0/\nnotes.txt\n")
        runner.when("info", exit_code=0, stdout="Path: trunk\n")
        result = gateway.branches()
        assert result.ok
        assert result.value == ["feature-x", "rel-1.0", "trunk"]
        assert runner.calls == [
            ["ls", f"{REPO}/branches@HEAD"],
            ["info", f"{REPO}/trunk@HEAD"],
        ]

    def test_trunk_not_duplicated(self, gateway, runner):
        runner.when("ls", stdout="trunk/\nfeature-x/\n")
        runner.when("info", exit_code=0)
        assert gateway.branches().value == ["trunk", "feature-x"]

    def test_missing_branches_folder(self, gateway, runner):
        runner.when("ls", exit_code=1, stderr="svn: E200009: Could not list all targets")
        runner.when("info", exit_code=0)
        assert gateway.branches().value == ["trunk"]

    def test_nothing_found(self, gateway, runner):
        runner.when("ls", exit_code=1)
        runner.when("info", exit_code=1)
        result = gateway.branches()
        assert result.ok
        assert result.value == []


class TestHasTree:
    @pytest.mark.parametrize("ref", ["head", "HEAD", "Head"])
    def test_head_any_case(self, gateway, runner, ref):
        assert gateway.has_tree(ref).value is True
        assert runner.calls == []

    def test_existing_revision(self, gateway, runner):
        runner.when("log", exit_code=0)
        assert gateway.has_tree("12").value is True
        assert runner.calls == [["log", "--limit", "1", f"{REPO}@12"]]

    def test_missing_revision(self, gateway, runner):
        runner.when("log", exit_code=1, stderr="svn: E160006: No such revision 999")
        assert gateway.has_tree("999").value is False


class TestTree:
    def test_invalid_when_info_has_no_entry(self, gateway, runner, info_empty_xml):
        runner.when("info", "--xml", stdout=info_empty_xml)
        result = gateway.tree("HEAD", "/nope", "HEAD")
        assert result.ok
        assert isinstance(result.value, TreeInvalid)
        assert result.value.type == "invalid"
        assert runner.subcommands() == ["info"]

    def test_invalid_when_info_fails(self, gateway, runner):
        runner.when("info", "--xml", exit_code=1, stderr="svn: E170000: path not found")
        result = gateway.tree(path="/missing")
        assert result.value.type == "invalid"
        assert runner.subcommands() == ["info"]

    def test_invalid_when_info_malformed(self, gateway, runner):
        runner.when("info", "--xml", stdout="<info><entry")
        assert gateway.tree(path="/trunk").value.type == "invalid"

    def test_directory_listing(self, gateway, runner, info_dir_xml, ls_trunk_xml):
        runner.when("info", "--xml", stdout=info_dir_xml)
        runner.when("ls", "--xml", stdout=ls_trunk_xml)
        result = gateway.tree("HEAD", "/trunk", "HEAD")
        assert result.ok
        tree = result.value
        assert isinstance(tree, TreeDir)
        assert tree.path == "/trunk"
        assert len(tree.entries) == 3
        assert [e.name for e in tree.entries] == ["README.txt", "src", "setup.py"]
        assert [e.size is not None for e in tree.entries] == [True, False, True]
        assert runner.calls == [
            ["info", "--xml", f"{REPO}/trunk@HEAD"],
            ["ls", "--xml", f"{REPO}/trunk@HEAD"],
        ]

    def test_trailing_separator_same_result(self, gateway, runner, info_dir_xml, ls_trunk_xml):
        runner.when("info", "--xml", stdout=info_dir_xml)
        runner.when("ls", "--xml", stdout=ls_trunk_xml)
        plain = gateway.tree("HEAD", "/trunk", "HEAD")
        slashed = gateway.tree("HEAD", "/trunk/", "HEAD")
        assert plain == slashed
        assert runner.calls[0] == runner.calls[2]

    def test_file_content(self, gateway, runner, info_file_xml):
        runner.when("info", "--xml", stdout=info_file_xml)
        runner.when("cat", stdout="Read me.\n")
        result = gateway.tree(path="/trunk/README.txt", rev="40")
        assert isinstance(result.value, TreeFile)
        assert result.value.content == b"Read me.\n"
        assert runner.calls[-1] == ["cat", f"{REPO}/trunk/README.txt@40"]

    def test_revision_zero_kept(self, gateway, runner, info_empty_xml):
        runner.when("info", "--xml", stdout=info_empty_xml)
        gateway.tree(path="/trunk", rev=0)
        assert runner.calls[0] == ["info", "--xml", f"{REPO}/trunk@0"]

    def test_other_kind(self, gateway, runner):
        runner.when("info", "--xml", stdout='<info><entry kind="symlink" path="x"/></info>')
        result = gateway.tree(path="/x")
        assert isinstance(result.value, TreeOther)
        assert result.value.type == "symlink"

    def test_malformed_listing(self, gateway, runner, info_dir_xml):
        runner.when("info", "--xml", stdout=info_dir_xml)
        runner.when("ls", "--xml", stdout="<lists><list")
        assert gateway.tree(path="/trunk").error is ErrorKind.MALFORMED_OUTPUT

    def test_failed_listing(self, gateway, runner, info_dir_xml):
        runner.when("info", "--xml", stdout=info_dir_xml)
        runner.when("ls", "--xml", exit_code=1, stderr="svn: E000013: Permission denied")
        result = gateway.tree(path="/trunk")
        assert result.error is ErrorKind.TOOL_EXECUTION_FAILED
        assert "Permission denied" in result.detail


class TestShow:
    def test_defaults_to_head(self, gateway, runner):
        runner.when("cat", stdout="a\n\nb\n")
        result = gateway.show("/trunk/f.txt")
        assert result.value == b"a\n\nb\n"
        assert runner.calls == [["cat", f"{REPO}/trunk/f.txt@HEAD"]]

    def test_bytes_returned_unchanged(self, gateway, runner):
        blob = b"line one\r\nline two\rtail\xff\xfe\x00"
        runner.when("cat", stdout=blob)
        assert gateway.show("/trunk/data.bin").value == blob

    def test_not_found(self, gateway, runner):
        runner.when("cat", exit_code=1, stderr="svn: E200009: path not found")
        result = gateway.show("/trunk/missing.txt", "3")
        assert result.error is ErrorKind.NOT_FOUND


class TestShowCommit:
    def test_end_to_end(self, gateway, runner, log_42_xml, diff_42):
        runner.when("log", "--xml", stdout=log_42_xml)
        runner.when("diff", "-c", "42", stdout=diff_42)
        result = gateway.show_commit(42)
        assert result.ok
        meta = result.value.metadata
        assert meta.hash == "42"
        assert meta.parent == "41"
        assert meta.author_name == "alice"
        assert meta.date == "2012-05-10 14:33:12"
        assert meta.subject == "Fix greeting"
        assert meta.body == "Use the proper salutation."
        assert meta.paths[0].path == "/trunk/hello.c"

        diff = result.value.diff
        assert list(diff) == ["trunk/hello.c"]
        assert diff["trunk/hello.c"].more == 3
        assert diff["trunk/hello.c"].less == 2
        assert runner.calls == [
            ["log", "--xml", "-v", "--limit", "1", f"{REPO}@42"],
            ["diff", "-c", "42", REPO],
        ]

    def test_head_resolves_to_number(self, gateway, runner, diff_42):
        runner.when("log", "--xml", stdout=log_xml(log_entry_xml(42)))
        runner.when("diff", stdout=diff_42)
        result = gateway.show_commit("HEAD")
        assert result.value.metadata.hash == "42"
        assert runner.calls[1] == ["diff", "-c", "42", REPO]

    def test_single_line_message(self, gateway, runner):
        runner.when("log", "--xml", stdout=log_xml(log_entry_xml(3, msg="One liner")))
        runner.when("diff", stdout="")
        meta = gateway.show_commit("3").value.metadata
        assert meta.subject == "One liner"
        assert meta.body == ""
        assert meta.parent == "2"

    def test_revision_one_parent_floored(self, gateway, runner):
        runner.when("log", "--xml", stdout=log_xml(log_entry_xml(0, msg="init")))
        runner.when("diff", stdout="")
        assert gateway.show_commit("0").value.metadata.parent == "0"

    def test_unsafe_revision_coerced(self, gateway, runner, log_42_xml):
        runner.when("log", "--xml", stdout=log_42_xml)
        runner.when("diff", stdout="")
        gateway.show_commit("42; rm -rf /")
        assert runner.calls[0][-1] == f"{REPO}@HEAD"

    def test_no_such_revision(self, gateway, runner):
        runner.when("log", "--xml", exit_code=1, stderr="svn: E160006: No such revision 999")
        assert gateway.show_commit("999").error is ErrorKind.NOT_FOUND

    def test_empty_log(self, gateway, runner):
        runner.when("log", "--xml", stdout=log_xml())
        assert gateway.show_commit("5").error is ErrorKind.NOT_FOUND

    def test_malformed_log(self, gateway, runner):
        runner.when("log", "--xml", stdout="<log><logentry")
        assert gateway.show_commit("5").error is ErrorKind.MALFORMED_OUTPUT

    def test_diff_failure_propagates(self, gateway, runner, log_42_xml):
        runner.when("log", "--xml", stdout=log_42_xml)
        runner.when("diff", exit_code=1, stderr="svn: E195012: Unable to find repository location")
        assert gateway.show_commit("42").error is ErrorKind.TOOL_EXECUTION_FAILED


class TestLog:
    def _stub_history(self, runner, revisions):
        for r in revisions:
            runner.when(
                "log", "--xml", "-v", "--limit", "1",
                target=f"{REPO}@{r}",
                stdout=log_xml(log_entry_xml(r)),
            )
        runner.when("log", "--xml", stdout=log_xml(*(log_entry_xml(r) for r in revisions)))
        runner.when("diff", stdout="")

    def test_fetches_limit_plus_offset(self, gateway, runner):
        self._stub_history(runner, [10, 9, 8, 7, 6])
        gateway.log("HEAD", limit=3, offset=2, filepath="/trunk")
        assert runner.calls[0] == ["log", "--xml", "-v", "--limit", "5", f"{REPO}/trunk@HEAD"]

    def test_offset_drops_newest(self, gateway, runner):
        self._stub_history(runner, [10, 9, 8, 7, 6])
        result = gateway.log("HEAD", limit=3, offset=2)
        assert result.ok
        shown = [call[-1] for call in runner.calls if call[0] == "log"][1:]
        assert shown == [f"{REPO}@8", f"{REPO}@7", f"{REPO}@6"]
        assert len(result.value) == 3

    def test_order_preserved(self, gateway, runner):
        self._stub_history(runner, [3, 2, 1])
        gateway.log(limit=3)
        diffs = [call[2] for call in runner.calls if call[0] == "diff"]
        assert diffs == ["3", "2", "1"]

    def test_branch_sanitized(self, gateway, runner):
        self._stub_history(runner, [1])
        gateway.log("feature-x", limit=1)
        assert runner.calls[0][-1] == f"{REPO}@HEAD"

    def test_numeric_branch_kept(self, gateway, runner):
        self._stub_history(runner, [7])
        gateway.log("7", limit=1)
        assert runner.calls[0][-1] == f"{REPO}@7"

    def test_zero_limit(self, gateway, runner):
        assert gateway.log(limit=0).value == []
        assert runner.calls == []

    def test_tool_failure(self, gateway, runner):
        runner.when("log", exit_code=1, stderr="svn: E160013: path not found")
        result = gateway.log(filepath="/missing")
        assert result.error is ErrorKind.TOOL_EXECUTION_FAILED

    def test_malformed(self, gateway, runner):
        runner.when("log", stdout="not xml")
        assert gateway.log().error is ErrorKind.MALFORMED_OUTPUT


class TestDiff:
    def test_default_uses_change(self, gateway, runner, diff_42):
        runner.when("diff", stdout=diff_42)
        result = gateway.diff("42")
        assert result.ok
        assert runner.calls == [["diff", "-c", "42", REPO]]

    def test_explicit_parent(self, gateway, runner, diff_multi):
        runner.when("diff", stdout=diff_multi)
        result = gateway.diff("43", parent="40")
        assert runner.calls == [["diff", "-r", "40:43", REPO]]
        assert result.value["trunk/a.txt"].more == 2
        assert result.value["trunk/old.txt"].less == 3

    def test_empty_diff(self, gateway, runner):
        runner.when("diff", stdout="")
        assert gateway.diff("5").value == {}

    def test_head_resolved_to_number(self, gateway, runner, diff_42):
        runner.when("info", "--xml", stdout='<info><entry kind="dir" path="." revision="42"/></info>')
        runner.when("diff", stdout=diff_42)
        result = gateway.diff("HEAD")
        assert result.ok
        assert runner.calls == [
            ["info", "--xml", f"{REPO}@HEAD"],
            ["diff", "-c", "42", REPO],
        ]

    def test_head_unresolvable(self, gateway, runner):
        runner.when("info", "--xml", exit_code=1, stderr="svn: E170013: Unable to connect")
        result = gateway.diff("HEAD")
        assert result.error is ErrorKind.TOOL_EXECUTION_FAILED
        assert runner.subcommands() == ["info"]

    def test_head_allowed_in_range(self, gateway, runner, diff_42):
        runner.when("diff", stdout=diff_42)
        gateway.diff("HEAD", parent="40")
        assert runner.calls == [["diff", "-r", "40:HEAD", REPO]]


class TestBlame:
    def test_unsupported(self, gateway, runner):
        result = gateway.blame("HEAD", "/trunk/README.txt")
        assert result.error is ErrorKind.UNSUPPORTED
        assert runner.calls == []


class TestFaultTranslation:
    def test_timeout(self, gateway, runner):
        runner.when("cat", raises=SvnTimeoutError("svn command timed out after 30s"))
        result = gateway.show("/trunk/big.iso")
        assert result.error is ErrorKind.TIMEOUT

    def test_not_installed(self, gateway, runner):
        runner.when("ls", raises=SvnNotInstalledError("svn is not installed or not on PATH"))
        result = gateway.branches()
        assert result.error is ErrorKind.TOOL_EXECUTION_FAILED
        assert "not installed" in result.detail

    def test_execute_passthrough(self, gateway, runner):
        runner.when("propget", exit_code=1, stderr="svn: W200017: Property not found")
        result = gateway.execute(["propget", "svn:ignore", REPO])
        assert result.ok
        assert result.value.exit_code == 1
