"""Tests for the agentfactory command line interface."""

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from agentfactory import load_compiled
from agentfactory._cli.main import app
from tests.spec_helpers import make_agent, make_edge

runner = CliRunner()


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty project directory with no [tool.agentfactory] config, used as cwd."""
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'demo'\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_spec(directory: Path, raw: dict[str, Any], name: str = "spec.json") -> Path:
    path = directory / name
    path.write_text(json.dumps(raw))
    return path


class TestCompileCommand:
    def test_compile_to_file(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "build" / "compiled.json"

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])

        assert result.exit_code == 0, result.output
        compiled = load_compiled(output)
        assert [a.id for a in compiled.agents] == ["agent1", "agent2"]

    def test_compile_with_check_ir_and_digest(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "compiled.toml"

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(output), "--check-ir", "--digest"])

        assert result.exit_code == 0, result.output
        assert "sha256:" in result.output
        assert output.exists()

    def test_compile_failure_exits_non_zero(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        two_agent_spec["orchestration"]["edges"].append(make_edge("edge2", "agent2", "agent1"))
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "compiled.json"

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])

        assert result.exit_code == 1
        assert "CYCLE_DETECTED" in result.output
        assert not output.exists()

    def test_schema_failure_exits_non_zero(self, project_dir: Path) -> None:
        spec_path = _write_spec(project_dir, {"name": "Test"})

        result = runner.invoke(app, ["compile", str(spec_path)])

        assert result.exit_code == 1
        assert "INVALID_SPEC" in result.output

    def test_check_ir_failure(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        two_agent_spec["orchestration"]["gates"] = [{"id": "gate1", "type": "approval"}]
        two_agent_spec["orchestration"]["edges"].append(make_edge("edge2", "agent2", "gate1"))
        spec_path = _write_spec(project_dir, two_agent_spec)

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(project_dir / "c.json"), "--check-ir"])

        assert result.exit_code == 1
        assert "INVALID_NEXT_AGENT" in result.output

    def test_unsupported_output_suffix(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "out.yaml"

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Unsupported output file type" in result.output
        assert not output.exists()

    def test_toml_output_with_null_config(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        two_agent_spec["orchestration"]["tools"][0]["config"] = {"url": "x", "proxy": None}
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "out.toml"

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert load_compiled(output).get_agent("agent1").tools[0].config == {"url": "x"}

    def test_unwritable_toml_value_exits_cleanly(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        # TOML arrays cannot hold null.
        two_agent_spec["orchestration"]["tools"][0]["config"] = {"hosts": ["a", None]}
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "out.toml"

        result = runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "Could not write IR" in result.output
        assert not output.exists()

    def test_missing_spec_file(self, project_dir: Path) -> None:
        result = runner.invoke(app, ["compile", str(project_dir / "nope.json")])
        assert result.exit_code == 1

    def test_no_spec_and_no_config(self, project_dir: Path) -> None:  # noqa: ARG002
        result = runner.invoke(app, ["compile"])
        assert result.exit_code == 1

    def test_paths_from_config(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        _write_spec(project_dir, two_agent_spec, "workflow.json")
        (project_dir / "pyproject.toml").write_text(
            '[tool.agentfactory]\nspec = "workflow.json"\noutput = "out/compiled.json"\ncheck_ir = true\n',
        )

        result = runner.invoke(app, ["compile"])

        assert result.exit_code == 0, result.output
        assert (project_dir / "out" / "compiled.json").exists()


class TestCheckCommand:
    def test_valid_graph(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        spec_path = _write_spec(project_dir, two_agent_spec)

        result = runner.invoke(app, ["check", str(spec_path)])

        assert result.exit_code == 0, result.output

    def test_warnings_pass_unless_strict(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        two_agent_spec["orchestration"]["agents"].append(make_agent("lonely"))
        spec_path = _write_spec(project_dir, two_agent_spec)

        lenient = runner.invoke(app, ["check", str(spec_path)])
        strict = runner.invoke(app, ["check", str(spec_path), "--strict"])

        assert lenient.exit_code == 0, lenient.output
        assert "UNREACHABLE_NODE" in lenient.output
        assert strict.exit_code == 1

    def test_errors_fail(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        two_agent_spec["orchestration"]["outputs"] = ["ghost"]
        spec_path = _write_spec(project_dir, two_agent_spec)

        result = runner.invoke(app, ["check", str(spec_path)])

        assert result.exit_code == 1
        assert "INVALID_OUTPUT_NODE" in result.output


class TestVerifyCommand:
    def test_consistent_ir(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "compiled.json"
        runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])

        result = runner.invoke(app, ["verify", str(output)])

        assert result.exit_code == 0, result.output

    def test_hand_edited_ir(self, project_dir: Path, two_agent_spec: dict[str, Any]) -> None:
        spec_path = _write_spec(project_dir, two_agent_spec)
        output = project_dir / "compiled.json"
        runner.invoke(app, ["compile", str(spec_path), "-o", str(output)])
        data = json.loads(output.read_text())
        data["startAgent"] = "ghost"
        output.write_text(json.dumps(data))

        result = runner.invoke(app, ["verify", str(output)])

        assert result.exit_code == 1
        assert "INVALID_START_AGENT" in result.output

    def test_malformed_ir(self, project_dir: Path) -> None:
        path = project_dir / "compiled.json"
        path.write_text(json.dumps({"id": "x"}))

        result = runner.invoke(app, ["verify", str(path)])

        assert result.exit_code == 1


class TestSchemaCommand:
    def test_writes_schema(self, project_dir: Path) -> None:
        output = project_dir / "schema" / "spec.schema.json"

        result = runner.invoke(app, ["schema", "-o", str(output)])

        assert result.exit_code == 0, result.output
        schema = json.loads(output.read_text())
        assert "orchestration" in schema["properties"]
        assert "startNode" in schema["$defs"]["Orchestration"]["properties"]
