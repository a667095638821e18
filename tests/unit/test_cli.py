"""
Tests for the botstorage command-line interface.
"""

import json
import logging

import pytest
import yaml
from click.testing import CliRunner

from botstorage import cli as cli_module
from botstorage.cli import cli
from botstorage.facade import Storage
from botstorage.storage.memory import InMemoryTableStoreClient


CONNECTION_STRING = (
    "DefaultEndpointsProtocol=http;AccountName=devstoreaccount1;"
    "AccountKey=a2V5;TableEndpoint=http://127.0.0.1:10002/devstoreaccount1;"
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Every invocation reconfigures logging; undo it after each test."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def client():
    """In-memory client shared by every invocation of a test."""
    return InMemoryTableStoreClient()


@pytest.fixture
def runner(monkeypatch, client):
    """CLI runner whose storage uses the in-memory client."""
    monkeypatch.setattr(cli_module, "Storage", lambda config: Storage(config, client=client))
    monkeypatch.setenv("BOTSTORAGE_CONNECTION_STRING", CONNECTION_STRING)
    monkeypatch.setenv("BOTSTORAGE_TABLE_PREFIX", "botkit")
    # Keep log lines out of the command output the tests parse
    monkeypatch.setenv("BOTSTORAGE_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("BOTSTORAGE_LOG_FORMAT", raising=False)
    return CliRunner()


class TestCommands:
    """Tests for get/save/delete/list."""

    def test_save_then_get(self, runner):
        """Test saving a record and reading it back."""
        result = runner.invoke(cli, ["save", "teams", '{"id": "T1", "foo": "bar"}'])
        assert result.exit_code == 0, result.output
        assert "Saved T1 to teams" in result.output

        result = runner.invoke(cli, ["get", "teams", "T1"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"id": "T1", "foo": "bar"}

    def test_list(self, runner):
        """Test listing every record of a collection."""
        runner.invoke(cli, ["save", "users", '{"id": "U1"}'])
        runner.invoke(cli, ["save", "users", '{"id": "U2"}'])

        result = runner.invoke(cli, ["list", "users"])

        assert result.exit_code == 0, result.output
        assert sorted(r["id"] for r in json.loads(result.output)) == ["U1", "U2"]

    def test_delete(self, runner):
        """Test deleting a record."""
        runner.invoke(cli, ["save", "channels", '{"id": "C1"}'])

        result = runner.invoke(cli, ["delete", "channels", "C1"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, ["get", "channels", "C1"])
        assert result.exit_code == 1
        assert "NotFound" in result.output

    def test_invalid_json(self, runner):
        """Test that malformed JSON is a usage error."""
        result = runner.invoke(cli, ["save", "teams", "{nope"])
        assert result.exit_code == 2

    def test_record_without_id(self, runner, client):
        """Test that a record without id fails without touching the store."""
        result = runner.invoke(cli, ["save", "teams", '{"foo": "bar"}'])

        assert result.exit_code == 1
        assert "InvalidRecord" in result.output
        assert sum(client.calls.values()) == 0

    def test_unknown_collection(self, runner):
        """Test that unknown collections are reported."""
        result = runner.invoke(cli, ["list", "guilds"])

        assert result.exit_code == 2
        assert "Unknown collection" in result.output


class TestConfiguration:
    """Tests for configuration handling."""

    def test_missing_configuration(self, monkeypatch):
        """Test that missing configuration exits with a configuration error."""
        monkeypatch.delenv("BOTSTORAGE_CONNECTION_STRING", raising=False)
        monkeypatch.delenv("BOTSTORAGE_TABLE_PREFIX", raising=False)

        result = CliRunner().invoke(cli, ["list", "teams"])

        assert result.exit_code == 2
        assert "InvalidConfiguration" in result.output

    def test_malformed_connection_string(self, monkeypatch):
        """Test that a connection string the SDK rejects is a configuration error."""
        monkeypatch.setenv("BOTSTORAGE_CONNECTION_STRING", "not a connection string")
        monkeypatch.setenv("BOTSTORAGE_TABLE_PREFIX", "botkit")

        result = CliRunner().invoke(cli, ["list", "teams"])

        assert result.exit_code == 2
        assert "InvalidConfiguration" in result.output

    def test_table_prefix_option(self, runner, client):
        """Test that --table-prefix overrides the environment."""
        result = runner.invoke(cli, ["--table-prefix", "otherbot", "save", "teams", '{"id": "T1"}'])

        assert result.exit_code == 0, result.output
        assert client.table_names() == ["otherbotTeams"]

    def test_version(self):
        """Test the version option."""
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "botstorage" in result.output


class TestLogging:
    """Tests that commands log the way the configuration asks."""

    def test_json_log_format(self, runner, monkeypatch):
        """Test that a JSON log format produces one JSON object per log line."""
        monkeypatch.setenv("BOTSTORAGE_LOG_FORMAT", "json")

        result = runner.invoke(cli, ["--log-level", "INFO", "save", "teams", '{"id": "T1"}'])

        assert result.exit_code == 0, result.output
        entries = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
        ensured = [e for e in entries if e["message"] == "Ensuring table: [botkitTeams]"]
        assert len(ensured) == 1
        assert ensured[0]["level"] == "INFO"
        assert ensured[0]["module"] == "botstorage.storage.provisioner"
        assert ensured[0]["context"] == {"table": "botkitTeams"}

    def test_log_level_option_overrides_environment(self, runner):
        """Test that --log-level wins over BOTSTORAGE_LOG_LEVEL."""
        result = runner.invoke(cli, ["--log-level", "ERROR", "save", "teams", '{"id": "T1"}'])

        assert result.exit_code == 0, result.output
        assert logging.getLogger().level == logging.ERROR

    def test_config_file_logging_section(self, runner, monkeypatch, tmp_path):
        """Test that level, format and file from the config file are applied."""
        monkeypatch.delenv("BOTSTORAGE_LOG_LEVEL")
        log_file = tmp_path / "botstorage.log"
        config_file = tmp_path / "storage.yaml"
        config_file.write_text(yaml.safe_dump({
            "logging": {"level": "INFO", "format": "json", "file": str(log_file)},
        }))

        result = runner.invoke(cli, ["-c", str(config_file), "save", "users", '{"id": "U1"}'])

        assert result.exit_code == 0, result.output
        lines = log_file.read_text().splitlines()
        messages = [json.loads(line)["message"] for line in lines]
        assert "Ensuring table: [botkitUsers]" in messages
        assert all("a2V5" not in line for line in lines)
