"""
Shell Session Tests
-------------------
End-to-end behaviour of one session: lines in, exit codes and output out.
"""

import io

import pytest

from pipeshell import Command, Continue, Shell, ShellConfig, Terminate, lines_from
from pipeshell.errors import (
    DanglingOperatorError,
    LimitExceededError,
    LineSyntaxError,
    UnknownCommandError,
    WriteToClosedPipeError,
)
from pipeshell.pipeline import Endpoint


class TestExecute:
    def test_true_and_false(self, shell):
        assert shell.execute("true && false") == Continue(1)
        assert shell.last_return_code == 1

    def test_false_or_true(self, shell):
        assert shell.execute("false || true") == Continue(0)

    def test_pipeline_output(self, shell, streams):
        shell.execute("seq 5 | grep -i 3 | cat")
        assert streams.stdout.getvalue() == "3\n"

    def test_glued_operator_is_passed_as_text(self, shell, streams):
        assert shell.execute("echo 1||echo 2") == Continue(0)
        assert streams.stdout.getvalue() == "1||echo 2\n"

    def test_blank_line_is_a_noop(self, shell):
        shell.last_return_code = 4
        assert shell.execute("   ") == Continue(4)

    def test_errors_raise_before_anything_runs(self, shell, streams):
        with pytest.raises(UnknownCommandError):
            shell.execute("echo first && nosuch")
        with pytest.raises(DanglingOperatorError):
            shell.execute("echo first |")
        with pytest.raises(LineSyntaxError):
            shell.execute("echo 'first")
        assert streams.stdout.getvalue() == ""

    def test_input_limit(self, streams):
        shell = Shell(config=ShellConfig(max_input_chars=10), stdout=streams.stdout)
        with pytest.raises(LimitExceededError):
            shell.execute("echo " + "x" * 20)

    def test_stage_limit(self, streams):
        shell = Shell(config=ShellConfig(max_pipe_stages=2), stdout=streams.stdout)
        with pytest.raises(LimitExceededError):
            shell.execute("echo a | cat | cat")

    def test_short_circuit_config(self, streams):
        shell = Shell(config=ShellConfig(short_circuit=True), stdout=streams.stdout)
        assert shell.execute("false && echo skipped") == Continue(1)
        assert streams.stdout.getvalue() == ""


class TestRunLine:
    def test_reports_errors_on_stderr(self, shell, streams):
        assert shell.run_line("nosuch arg") == Continue(1)
        assert "nosuch: command not found" in streams.stderr.getvalue()
        assert shell.last_return_code == 1

    def test_reports_unbalanced_quote(self, shell, streams):
        shell.run_line('echo "abc')
        assert "unbalanced quote" in streams.stderr.getvalue()

    def test_exit(self, shell):
        assert shell.run_line("exit 2") == Terminate(2)

    def test_exit_with_bad_code(self, shell, streams):
        assert shell.run_line("exit nope") == Continue(1)
        assert "numeric argument required" in streams.stderr.getvalue()


class TestExecLoop:
    def test_runs_until_exit(self, shell, streams):
        code = shell.exec(lines_from(["echo one", "", "  ", "exit 5", "echo never"]))
        assert code == 5
        assert streams.stdout.getvalue() == "one\n"

    def test_eof_returns_last_code(self, shell):
        assert shell.exec(lines_from(["false"])) == 1

    def test_line_errors_do_not_stop_the_loop(self, shell, streams):
        code = shell.exec(lines_from(["nosuch", "echo 'bad", "echo ok"]))
        assert code == 0
        assert streams.stdout.getvalue() == "ok\n"
        assert streams.stderr.getvalue().count("\n") == 2

    def test_exit_inside_pipeline(self, shell):
        assert shell.exec(lines_from(["echo a | exit 7 | cat"])) == 7
        assert not shell.pipeline.opened

    def test_line_source_from_constructor(self, streams):
        shell = Shell(stdout=streams.stdout, line_source=lines_from(["exit 3"]))
        assert shell.exec() == 3

    def test_default_source_reads_input(self, shell, monkeypatch):
        lines = iter(["echo hi", "exit 6"])
        prompts = []

        def fake_input(prompt):
            prompts.append(prompt)
            return next(lines)

        monkeypatch.setattr("builtins.input", fake_input)
        shell.set_prompt("$ ")
        assert shell.exec() == 6
        assert prompts == ["$ ", "$ "]

    def test_default_source_eof(self, shell, monkeypatch):
        def eof(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", eof)
        assert shell.exec() == 0


class TestSessionIO:
    def test_read_token_and_line(self, streams):
        shell = Shell(stdin=io.StringIO("3 apples\nrest\n"), stdout=streams.stdout)
        got = {}

        def take(sh, args):
            got["count"] = sh.read_token()
            got["line"] = sh.read_line()
            got["next"] = sh.read_line()
            got["eof"] = sh.read_line()
            return 0

        shell.insert_command("take", take)
        shell.execute("take")
        assert got == {"count": "3", "line": "apples", "next": "rest", "eof": None}

    def test_tokens_through_pipe(self, shell, streams):
        def count(sh, args):
            total = 0
            while sh.read_token() is not None:
                total += 1
            sh.print("total:", total)
            return 0

        shell.insert_command("count", count)
        shell.execute("echo a 'b c' d | count")
        assert streams.stdout.getvalue() == "total: 4\n"

    def test_stderr_bypasses_pipeline(self, shell, streams):
        def noisy(sh, args):
            sh.write_stderr("warning\n")
            sh.write("data\n")
            return 0

        shell.insert_command("noisy", noisy)
        shell.execute("noisy | wc -l")
        assert streams.stderr.getvalue() == "warning\n"
        assert streams.stdout.getvalue() == "1\n"

    def test_write_without_output_raises(self, shell):
        shell.stdout = None
        with pytest.raises(WriteToClosedPipeError):
            shell.write("x")


class TestCommands:
    def test_insert_replaces(self, shell, streams):
        shell.insert_command("greet", lambda sh, args: sh.write("old\n"))
        shell.insert_command("greet", lambda sh, args: sh.write("new\n"), "say hi")
        shell.execute("greet")
        assert streams.stdout.getvalue() == "new\n"
        assert shell.command("greet").description == "say hi"

    def test_insert_command_object(self, shell, streams):
        class Hello(Command):
            def invoke(self, sh, args):
                sh.write(f"hello {' '.join(args)}\n")
                return 0

        shell.insert_command(Hello("hello", "greets"))
        assert shell.contains("hello")
        shell.execute("hello world")
        assert streams.stdout.getvalue() == "hello world\n"

    def test_insert_name_needs_function(self, shell):
        with pytest.raises(TypeError):
            shell.insert_command("broken")

    def test_take(self, shell):
        taken = shell.take("echo")
        assert taken.name == "echo"
        assert not shell.contains("echo")
        assert shell.take("echo") is None


class TestLifecycle:
    def test_borrowed_buffers_survive_close(self, streams):
        a, b = io.StringIO(), io.StringIO()
        with Shell(stdout=streams.stdout, buffers=(a, b)) as shell:
            shell.execute("echo piped | cat")
        assert streams.stdout.getvalue() == "piped\n"
        assert not a.closed and not b.closed

    def test_owned_buffers_closed(self, streams):
        shell = Shell(stdout=streams.stdout)
        shell.close()
        assert shell.pipeline.output_buffer() is None
        assert shell.pipeline.buffer(Endpoint.BUFFER_1).stream.closed

    def test_prompt_from_config(self):
        assert Shell(config=ShellConfig(prompt="> ")).prompt == "> "
