"""CLI -- commands run against scripted models through typer's CliRunner."""

import pytest
from typer.testing import CliRunner

from agent_engine import cli
from agent_engine.service import AgentService

runner = CliRunner()


@pytest.fixture
def use_model(monkeypatch):
    """Make the CLI build its service around the given model."""

    def install(llm):
        monkeypatch.setattr(
            cli, "AgentService", lambda settings=None: AgentService(llm=llm, settings=settings)
        )

    return install


def test_react_prints_answer(use_model, scripted):
    use_model(scripted([
        '思考：算\n行动：calculator\n行动输入：{"expression": "6*7"}',
        "思考：好\n最终答案：FORTYTWO",
    ]))
    result = runner.invoke(cli.app, ["react", "6*7?"])
    assert result.exit_code == 0
    assert "FORTYTWO" in result.output
    assert "calculator" in result.output


def test_react_exhausted_exit_code(use_model, scripted):
    use_model(scripted(['行动：calculator\n行动输入：{"expression": "1"}']))
    result = runner.invoke(cli.app, ["react", "loop", "--max-steps", "2"])
    assert result.exit_code == 2
    assert "No final answer within 2 steps" in result.output


def test_react_confused_exit_code(use_model, scripted):
    use_model(scripted(["just chatting [not markup]"]))
    result = runner.invoke(cli.app, ["react", "hello"])
    assert result.exit_code == 3
    assert "just chatting [not markup]" in result.output


def test_react_english_markers(use_model, scripted):
    use_model(scripted(["Thought: easy\nFinal Answer: BONJOUR"]))
    result = runner.invoke(cli.app, ["react", "greet", "--markers", "en"])
    assert result.exit_code == 0
    assert "BONJOUR" in result.output


def test_collaborate_shows_rounds(use_model, echo_model):
    use_model(echo_model)
    result = runner.invoke(cli.app, ["collaborate", "Plan", "--show-rounds"])
    assert result.exit_code == 0
    assert "analyst_final" in result.output
    assert "coordinator#3" in result.output


def test_tools_lists_builtins(use_model, scripted):
    use_model(scripted(["x"]))
    result = runner.invoke(cli.app, ["tools"])
    assert result.exit_code == 0
    for name in ("search", "calculator", "get_time"):
        assert name in result.output
