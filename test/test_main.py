"""
Command line tests for DSH
"""

import pytest

import main
from symbol_table import SymbolTable
from values import Value


@pytest.fixture
def feed_input(monkeypatch):
  """Replace input() with a scripted sequence of lines"""
  monkeypatch.setattr(main, "setup_readline", lambda env: None)

  def feed(lines):
    remaining = iter(lines)

    def fake_input(prompt=""):
      try:
        return next(remaining)
      except StopIteration:
        raise EOFError

    monkeypatch.setattr("builtins.input", fake_input)

  return feed


class TestRunLine:

  def test_skips_blank_and_comment_lines(self, env):
    assert main.run_line("   ", env) is None
    assert main.run_line("# note", env) is None

  def test_assignment_then_expression(self, env):
    assert main.run_line("x = 4", env).message == "x = 4"
    assert main.run_line("x * x", env).message == "16"


class TestEvalFlag:

  def test_prints_result(self, capsys):
    main.main(["-e", "2 + 3 * 4"])
    assert capsys.readouterr().out.strip() == "14"

  def test_error_exits_nonzero(self, capsys):
    with pytest.raises(SystemExit) as exc_info:
      main.main(["-e", "1 / 0"])
    assert exc_info.value.code == 1
    assert "[Error] Division by zero" in capsys.readouterr().out

  def test_debug_traces(self, capsys):
    main.main(["--debug", "-e", "1 + 1"])
    assert "Evaluating: '1 + 1'" in capsys.readouterr().out


class TestScripts:

  def test_runs_lines_in_order(self, tmp_path, capsys):
    script = tmp_path / "session.dsh"
    script.write_text("# setup\nx = 5\n\nx * 2\n")
    main.main([str(script)])
    assert capsys.readouterr().out.splitlines() == ["x = 5", "10"]

  def test_failing_line_is_reported(self, tmp_path, capsys):
    script = tmp_path / "broken.dsh"
    script.write_text("x = 1\ny + x\n")
    with pytest.raises(SystemExit) as exc_info:
      main.main([str(script)])
    assert exc_info.value.code == 1
    assert f"{script}:2: [Error] Undefined variable 'y'" in capsys.readouterr().out

  def test_missing_script(self, tmp_path, capsys):
    with pytest.raises(SystemExit):
      main.main([str(tmp_path / "nope.dsh")])
    assert "does not exist" in capsys.readouterr().out


class TestInteractive:

  def test_session(self, feed_input, capsys):
    feed_input(["a = 3", ":type a", ":env", "a + 1", ":bogus", "exit"])
    main.main(["-i"])
    out = capsys.readouterr().out
    assert "a = 3\n" in out
    assert "a : integer" in out
    assert "  a = 3 : integer" in out
    assert "4\n" in out
    assert "Unknown command ':bogus', try :help" in out

  def test_end_of_input_exits(self, feed_input, capsys):
    feed_input([])
    main.run_interactive_mode(SymbolTable())
    assert "Goodbye!" in capsys.readouterr().out

  def test_type_of_undefined(self, capsys):
    env = SymbolTable({"s": Value.of("hi")})
    main.run_meta_command(":type nope", env)
    main.run_meta_command(":type s", env)
    out = capsys.readouterr().out
    assert "Undefined variable 'nope'" in out
    assert "s : string" in out

  def test_no_arguments_prints_help(self, capsys):
    main.main([])
    assert "usage: dsh" in capsys.readouterr().out
