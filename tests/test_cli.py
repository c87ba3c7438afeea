"""Tests for the command-line interface."""

import json
from unittest.mock import MagicMock, patch

import pytest

from api_search.agent.browser_agent import BrowserAction, SolveResult, SolveStatus
from api_search.config.settings import Settings
from api_search.core.exceptions import ConfigurationError, IndexNotInitializedError, LLMError
from api_search.ui.cli import main


@pytest.fixture
def components(mock_engine):
    return {
        "settings": Settings(openai_api_key="sk-test", index_file=None),
        "engine": mock_engine,
        "agent": MagicMock(),
        "model_api": MagicMock(),
    }


@pytest.fixture
def run(components):
    def invoke(*argv):
        with patch("api_search.config.create_components", return_value=components):
            return main(list(argv))

    return invoke


class TestCLI:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 2
        assert "usage" in capsys.readouterr().out

    def test_search_json(self, run, mock_engine, capsys):
        assert run("search", "rain tomorrow", "--no-verify", "-n", "3", "--json") == 0

        output = json.loads(capsys.readouterr().out)
        assert output[0]["title"] == "Weather API"
        query, options = mock_engine.search.call_args[0]
        assert query == "rain tomorrow"
        assert options.top_n == 3
        assert options.verify is False

    def test_search_text(self, run, capsys):
        assert run("search", "rain") == 0
        out = capsys.readouterr().out
        assert "1. Weather API (0.930)" in out
        assert "http://10.0.0.1:8080/" in out

    def test_search_requires_query(self, run, capsys):
        assert run("search") == 2

    def test_interactive(self, run, mock_engine, capsys):
        with patch("builtins.input", side_effect=["rain", "quit"]):
            assert run("search", "-i") == 0
        assert mock_engine.search.call_count == 1
        assert "Goodbye!" in capsys.readouterr().out

    def test_interactive_survives_failed_query(self, run, mock_engine, capsys):
        mock_engine.search.side_effect = [LLMError("rate limited"), mock_engine.search.return_value]
        with patch("builtins.input", side_effect=["rain", "snow", "quit"]):
            assert run("search", "-i") == 0

        assert mock_engine.search.call_count == 2
        captured = capsys.readouterr()
        assert "rate limited" in captured.err
        assert "Weather API" in captured.out

    def test_domain_error_exit_code(self, run, mock_engine, capsys):
        mock_engine.search.side_effect = IndexNotInitializedError("Index is not initialized")
        assert run("search", "rain") == 1
        assert "Index is not initialized" in capsys.readouterr().err

    def test_configuration_error(self, capsys):
        with patch("api_search.config.create_components", side_effect=ConfigurationError("OPENAI_API_KEY is required")):
            assert main(["cache-stats"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_cache_stats(self, run, capsys):
        assert run("cache-stats", "--json") == 0
        assert json.loads(capsys.readouterr().out)["hits"] == 3

    def test_cache_clear(self, run, mock_engine):
        assert run("cache-clear") == 0
        mock_engine.clear_cache.assert_called_once()

    def test_solve(self, run, components, capsys):
        components["agent"].solve.return_value = SolveResult(
            status=SolveStatus.ACTION,
            action=BrowserAction(address="http://10.0.0.1:8080", endpoint="/forecast"),
        )
        assert run("solve", "rain tomorrow", "--json") == 0
        assert json.loads(capsys.readouterr().out)["action"]["endpoint"] == "/forecast"

    def test_solve_no_api(self, run, components, capsys):
        components["agent"].solve.return_value = SolveResult(status=SolveStatus.NO_RELEVANT_API)
        assert run("solve", "order pizza") == 0
        assert "No relevant API found." in capsys.readouterr().out

    def test_index_endpoints(self, run, mock_engine, sample_documents, tmp_path, capsys):
        endpoints_file = tmp_path / "endpoints.json"
        endpoints_file.write_text(json.dumps([{"host": "10.0.0.1", "port": 8080}]))
        output = tmp_path / "index.json"
        mock_engine.refresh_index.return_value = sample_documents

        assert run("index", "--endpoints", str(endpoints_file), "-o", str(output), "-c", "2") == 0

        endpoints, options = mock_engine.refresh_index.call_args[0]
        assert endpoints[0].host == "10.0.0.1"
        assert options.max_concurrency == 2
        assert len(json.loads(output.read_text())) == 3

    def test_datagen(self, run, components, tmp_path, capsys):
        companies = tmp_path / "companies.txt"
        companies.write_text("Spotify\nChase\nNike\n")
        generator = MagicMock()
        generator.generate_all.return_value = [tmp_path / "spotify.json", None]

        with patch("api_search.indexing.SpecGenerator", return_value=generator):
            code = run("datagen", "--companies-file", str(companies), "-o", str(tmp_path), "-n", "2")

        assert code == 1
        assert generator.generate_all.call_args[0][0] == ["Spotify", "Chase"]
        assert "Generated 1 of 2 specs" in capsys.readouterr().out

    def test_index_needs_output(self, run, tmp_path):
        assert run("index", "--spec-dir", str(tmp_path)) == 2
