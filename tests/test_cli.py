from typer.testing import CliRunner

from deccalc.cli import app

runner = CliRunner()


def test_one_shot_expression() -> None:
    result = runner.invoke(app, ["5 + 10 * 2"])
    assert result.exit_code == 0
    assert result.output == "25\n"


def test_one_shot_error_exits_with_failure() -> None:
    result = runner.invoke(app, ["1 = 2"])
    assert result.exit_code == 1
    assert "Unable to parse the provided expression" in result.output
    assert "Can only assign to variable" in result.output


def test_precision_option() -> None:
    result = runner.invoke(app, ["--precision", "4", "2 / 3"])
    assert result.exit_code == 0
    assert result.output == "0.6667\n"


def test_precision_from_environment() -> None:
    result = runner.invoke(app, ["1 / 7"], env={"DECCALC_PRECISION": "2"})
    assert result.exit_code == 0
    assert result.output == "0.14\n"


def test_print_parse_tree() -> None:
    result = runner.invoke(app, ["--print-parse-tree", "1 + 2"])
    assert result.exit_code == 0
    assert "Parse tree:\nADD\n  Number(1)\n  Number(2)\n" in result.output
    assert result.output.endswith("3\n")


def test_interactive_session_keeps_variables() -> None:
    result = runner.invoke(app, [], input="devil = 666\n\ndevil - 666\nghost\n100 / 0.5\n")
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0] == "Type in an expression and hit enter"
    assert lines[1:3] == ["666", "0"]
    assert 'Variable "ghost" has not been assigned' in lines
    assert lines[-1] == "200"


def test_interactive_session_survives_deep_nesting() -> None:
    result = runner.invoke(app, [], input="-" * 1200 + "1\n1+1\n")
    assert result.exit_code == 0
    assert "Expression is nested too deeply" in result.output
    assert result.output.splitlines()[-1] == "2"
