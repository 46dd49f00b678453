"""
Built-in Command Tests
----------------------
Each built-in run through a session, standalone and in pipelines.
"""

import io

import pytest

from pipeshell import Shell
from pipeshell.commands.base import CLEAR_SEQUENCE


def run(line, stdin=""):
    out, err = io.StringIO(), io.StringIO()
    shell = Shell(stdin=io.StringIO(stdin), stdout=out, stderr=err)
    outcome = shell.run_line(line)
    return outcome.code, out.getvalue(), err.getvalue()


class TestEcho:
    def test_joins_arguments(self):
        assert run("echo a   'b  c'") == (0, "a b  c\n", "")

    def test_copies_input_without_arguments(self):
        assert run("echo", stdin="typed") == (0, "typed\n", "")
        assert run("echo x | echo") == (0, "x\n", "")


class TestHelp:
    def test_lists_commands(self):
        code, out, _ = run("help")
        assert code == 0
        assert out.startswith("Available commands:\n")
        assert "  grep " in out
        assert "exit" in out

    def test_single_command_with_usage(self):
        code, out, _ = run("help head")
        assert code == 0
        assert out.startswith("head: print the first lines of input\n")
        assert "-n, --lines" in out

    def test_unknown_command(self):
        code, _, err = run("help nosuch")
        assert code == 1
        assert "nosuch" in err


class TestText:
    def test_cat_passes_through(self):
        assert run("cat", stdin="a\nb\n") == (0, "a\nb\n", "")

    def test_grep(self):
        assert run("seq 12 | grep 1") == (0, "1\n10\n11\n12\n", "")

    def test_grep_ignore_case(self):
        assert run("grep -i abc", stdin="ABC\nxyz\naBc\n") == (0, "ABC\naBc\n", "")

    def test_grep_no_match(self):
        assert run("seq 3 | grep 9") == (1, "", "")

    def test_grep_needs_pattern(self):
        code, _, err = run("grep -i")
        assert code == 2
        assert "pattern required" in err

    def test_head_and_tail(self):
        assert run("seq 20 | head -n 2") == (0, "1\n2\n", "")
        assert run("seq 20 | tail --lines 3") == (0, "18\n19\n20\n", "")
        assert run("seq 20 | tail -n 0") == (0, "", "")
        assert run("seq 3 | head")[1] == "1\n2\n3\n"

    @pytest.mark.parametrize("line", ["echo '' | head", "echo '' | tail", "echo '' | grep ''"])
    def test_single_blank_line_passes_through(self, line):
        assert run(line) == (0, "\n", "")

    def test_blank_lines_kept_in_selection(self):
        assert run("head -n 2", stdin="\n\nx\n") == (0, "\n\n", "")

    def test_head_bad_count(self):
        code, _, err = run("seq 3 | head -n x")
        assert code == 1
        assert "invalid number" in err

    def test_wc(self):
        assert run("seq 7 | wc -l") == (0, "7\n", "")
        assert run("wc", stdin="") == (0, "0\n", "")
        assert run("wc -c")[0] == 1


class TestSeq:
    @pytest.mark.parametrize(
        "line,expected",
        [
            ("seq 3", "1\n2\n3\n"),
            ("seq 2 4", "2\n3\n4\n"),
            ("seq 3 1", "3\n2\n1\n"),
            ("seq 1 10 4", "1\n5\n9\n"),
            ("seq 5 1", "5\n4\n3\n2\n1\n"),
        ],
    )
    def test_ranges(self, line, expected):
        assert run(line) == (0, expected, "")

    def test_errors(self):
        assert run("seq")[0] == 1
        assert run("seq a")[0] == 1
        assert run("seq 1 5 0")[0] == 1


class TestMisc:
    def test_true_false(self):
        assert run("true")[0] == 0
        assert run("false")[0] == 1

    def test_clear(self):
        assert run("clear") == (0, CLEAR_SEQUENCE, "")

    def test_exit_code(self):
        assert run("exit 12")[0] == 12
        assert run("exit")[0] == 0
