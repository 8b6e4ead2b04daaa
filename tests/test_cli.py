"""
Tests for the CLI interface.
"""
import os
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from ai_codegen.cli.main import EXIT_CODE_FAIL, EXIT_CODE_PASS, app
from ai_codegen.core.models import GenerationOutcome
from ai_codegen.core.statistics import StatisticsSummary
from ai_codegen.storage.models import HistoryRecord, LanguageUsageStat

runner = CliRunner()


@pytest.fixture
def mock_services():
    """Replace service construction with a mock."""
    with patch('ai_codegen.cli.main.build_services') as mock_build:
        services = MagicMock()
        mock_build.return_value = services
        yield services


def _record(record_id=1, success=True, prompt="Create a simple Java class"):
    return HistoryRecord(
        id=record_id,
        created_at=datetime(2024, 1, 1, 12, 0, 0),
        prompt=prompt,
        language="Java",
        success=success,
        execution_time_ms=120,
        generated_code="public class Test {}" if success else None,
        error_message=None if success else "failed"
    )


class TestCLI:
    """Test CLI commands."""

    def test_no_command_prints_hint(self):
        result = runner.invoke(app, [])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Use --help" in result.output

    def test_generate_success(self, mock_services):
        """Successful generation prints the code."""
        mock_services.orchestrator.handle.return_value = GenerationOutcome.succeeded(
            "public class Test {}", "Create a simple Java class", "Java", 321
        )

        result = runner.invoke(app, ["generate", "Create a simple Java class", "--language", "Java"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "public class Test {}" in result.output
        assert "321ms" in result.output
        request = mock_services.orchestrator.handle.call_args.args[0]
        assert request.prompt == "Create a simple Java class"
        assert request.language == "Java"

    def test_generate_failure(self, mock_services):
        """Failed generation prints the error and exits non-zero."""
        mock_services.orchestrator.handle.return_value = GenerationOutcome.failed(
            "Create a class", "Java", "Gemini API key not configured", 0
        )

        result = runner.invoke(app, ["generate", "Create a class", "-l", "Java"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Gemini API key not configured" in result.output

    def test_generate_validation_failure_lists_fields(self, mock_services):
        mock_services.orchestrator.handle.return_value = GenerationOutcome.failed(
            " ", "Java", "Invalid request: prompt: Prompt cannot be empty",
            field_errors={"prompt": "Prompt cannot be empty"}
        )

        result = runner.invoke(app, ["generate", " ", "-l", "Java"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "prompt: Prompt cannot be empty" in result.output

    def test_history_recent(self, mock_services):
        mock_services.statistics.recent_history.return_value = [_record(1), _record(2, success=False)]

        result = runner.invoke(app, ["history", "--limit", "5"])

        assert result.exit_code == EXIT_CODE_PASS
        mock_services.statistics.recent_history.assert_called_once_with(5)
        assert "Generation history" in result.output
        assert "failed" in result.output

    def test_history_by_language(self, mock_services):
        mock_services.statistics.history_by_language.return_value = [_record()]

        result = runner.invoke(app, ["history", "--language", "Java"])

        assert result.exit_code == EXIT_CODE_PASS
        mock_services.statistics.history_by_language.assert_called_once_with("Java")

    def test_history_search(self, mock_services):
        mock_services.statistics.search_history.return_value = []

        result = runner.invoke(app, ["history", "--search", "rest"])

        assert result.exit_code == EXIT_CODE_PASS
        mock_services.statistics.search_history.assert_called_once_with("rest")
        assert "No generation history found" in result.output

    def test_stats(self, mock_services):
        mock_services.statistics.summary.return_value = StatisticsSummary(
            total=4,
            successful=3,
            failed=1,
            success_rate=75.0,
            average_execution_time_ms=117.0,
            language_usage=[LanguageUsageStat("Java", 2, 150.5)]
        )

        result = runner.invoke(app, ["stats"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Total generations: 4" in result.output
        assert "Success rate: 75.00%" in result.output
        assert "Java" in result.output

    def test_health_up(self, mock_services):
        mock_services.statistics.health.return_value = {
            "status": "UP", "database": "Connected", "totalGenerations": 12,
        }
        mock_services.client.is_configured.return_value = True

        result = runner.invoke(app, ["health"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "UP" in result.output
        assert "12 generations" in result.output

    def test_health_degraded_and_unconfigured(self, mock_services):
        mock_services.statistics.health.return_value = {
            "status": "DEGRADED", "database": "Error: count_total failed",
        }
        mock_services.client.is_configured.return_value = False

        result = runner.invoke(app, ["health"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "DEGRADED" in result.output
        assert "not configured" in result.output

    def test_invalid_config_file(self, tmp_path):
        """Unreadable configuration fails with a readable error."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("unknown: 1\n")

        result = runner.invoke(app, ["--config", str(config_path), "stats"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "Configuration error" in result.output

    def test_init_creates_database(self, tmp_path):
        db_path = tmp_path / "history.db"

        with patch.dict(os.environ, {"AI_CODEGEN_DB_PATH": str(db_path)}):
            result = runner.invoke(app, ["init"])

        assert result.exit_code == EXIT_CODE_PASS
        assert db_path.exists()

    def test_languages(self):
        result = runner.invoke(app, ["languages"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Python" in result.output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == EXIT_CODE_PASS
        assert "AI Code Generator" in result.output
