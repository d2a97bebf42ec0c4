"""Integration tests for the layout and inspect commands.

Uses CliRunner to test command output without subprocess overhead.
"""

import json

import pytest

typer = pytest.importorskip("typer")

from typer.testing import CliRunner  # noqa: E402

from jsonscape.cli import create_app  # noqa: E402
from jsonscape.cli._config import find_pyproject, load_settings  # noqa: E402
from jsonscape.settings import Direction, Settings  # noqa: E402
from tests.conftest import C, SAMPLE_DOC  # noqa: E402

runner_cli = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every command away from this repository's pyproject.toml."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def doc_path(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text(json.dumps(SAMPLE_DOC))
    return str(path)


def invoke(*args, **kwargs):
    return runner_cli.invoke(create_app(), list(args), **kwargs)


class TestLayoutCommand:
    def test_human_output(self, doc_path):
        result = invoke("layout", doc_path)

        assert result.exit_code == 0
        assert "Layout: 4 nodes | 3 edges | forward | curve" in result.output
        assert "$.children[1].children[0]" in result.output

    def test_json_envelope(self, doc_path):
        result = invoke("layout", doc_path, "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["schema_version"] == 1
        assert data["command"] == "layout"
        graph = data["data"]
        assert len(graph["nodes"]) == 4
        assert all(edge["path"].startswith("M ") for edge in graph["edges"])
        assert graph["settings"] == {"direction": "forward", "align": "firstChild", "linkStyle": "curve"}

    def test_direction_option(self, doc_path):
        result = invoke("layout", doc_path, "--json", "--direction", "downward", "--link-style", "orthogonal")

        assert result.exit_code == 0
        graph = json.loads(result.output)["data"]
        assert "pinX" in graph["meta"]
        assert " L " in graph["edges"][0]["path"]

    def test_collapse(self, doc_path):
        result = invoke("layout", doc_path, "--json", "--collapse", C)

        assert result.exit_code == 0
        assert len(json.loads(result.output)["data"]["nodes"]) == 3

    def test_unknown_collapse_id(self, doc_path):
        result = invoke("layout", doc_path, "--collapse", "$.nope")

        assert result.exit_code == 1
        assert "unknown node id(s) for --collapse: $.nope" in result.output

    def test_invalid_direction(self, doc_path):
        result = invoke("layout", doc_path, "--direction", "sideways")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_max_depth(self, doc_path):
        result = invoke("layout", doc_path, "--json", "--max-depth", "1")

        assert result.exit_code == 0
        assert len(json.loads(result.output)["data"]["nodes"]) < 4

    def test_stdin(self):
        result = invoke("layout", "-", "--json", input=json.dumps({"name": "solo"}))

        assert result.exit_code == 0
        assert len(json.loads(result.output)["data"]["nodes"]) == 1

    def test_output_file(self, doc_path, tmp_path):
        target = tmp_path / "out.json"
        result = invoke("layout", doc_path, "--output", str(target))

        assert result.exit_code == 0
        assert "Wrote layout output" in result.output
        assert json.loads(target.read_text())["command"] == "layout"

    def test_missing_file(self):
        result = invoke("layout", "missing.json")

        assert result.exit_code == 1
        assert "is not a file" in result.output

    def test_invalid_json(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        result = invoke("layout", str(bad))

        assert result.exit_code == 1
        assert "is not valid JSON" in result.output


class TestInspectCommand:
    def test_human_output(self, doc_path):
        result = invoke("inspect", doc_path)

        assert result.exit_code == 0
        assert "4 entities | 3 links" in result.output
        assert "Issues" not in result.output

    def test_json(self, doc_path):
        result = invoke("inspect", doc_path, "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)["data"]
        assert data["node_count"] == 4
        assert data["edge_count"] == 3
        assert data["issues"] == []
        assert [n["title"] for n in data["nodes"]] == ["A", "B", "C", "D"]


class TestProjectConfig:
    def test_section_absent(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        assert load_settings(tmp_path) == Settings()

    def test_tool_section(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            '[tool.jsonscape.layout]\ndirection = "downward"\n\n[tool.jsonscape]\ntransition_ms = 120\n'
        )
        settings = load_settings(tmp_path)

        assert settings.layout.direction is Direction.DOWNWARD
        assert settings.transition_ms == 120

    def test_found_from_subdirectory(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_pyproject(nested) == (tmp_path / "pyproject.toml").resolve()

    def test_layout_uses_config(self, doc_path, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[tool.jsonscape.layout]\ndirection = "downward"\n')
        result = invoke("layout", doc_path, "--json")

        assert result.exit_code == 0
        assert json.loads(result.output)["data"]["settings"]["direction"] == "downward"

    def test_invalid_config(self, doc_path, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[tool.jsonscape.layout]\nbogus = 1\n')
        result = invoke("layout", doc_path)

        assert result.exit_code == 1
        assert "Error:" in result.output
