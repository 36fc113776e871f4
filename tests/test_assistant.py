"""Integration tests for the assistant wiring and the CLI."""

import json
from unittest.mock import patch

import pytest

from rfp_assistant import main as cli
from rfp_assistant.assistant import RFPAssistant
from rfp_assistant.config import Config
from rfp_assistant.vector_store import StoreAvailability


@pytest.fixture
def config(monkeypatch, tmp_path):
    monkeypatch.setenv("PINECONE_API_KEY", "pc-key")
    monkeypatch.setenv("PINECONE_ENVIRONMENT", "us-east-1-aws")
    monkeypatch.setenv("PINECONE_INDEX_NAME", "rfp-index")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("RETRY_DELAY", "0")
    monkeypatch.delenv("RFP_SETTINGS_FILE", raising=False)
    monkeypatch.delenv("SYSTEM_PROMPT_PATH", raising=False)
    return Config(env_file=str(tmp_path / "missing.env"))


class TestRFPAssistant:

    def test_from_config_probes_once(self, config, fake_store, fake_llm):
        with patch("rfp_assistant.assistant.create_vector_store", return_value=fake_store), \
                patch("rfp_assistant.assistant.create_llm_gateway", return_value=fake_llm):
            assistant = RFPAssistant.from_config(config)

        assert assistant.availability is StoreAvailability.CONNECTED
        assert fake_store.calls == [("health", None)]
        assert assistant.pipeline.batch_size == 10
        assert assistant.query_service.top_k == 5

    def test_unreachable_store_runs_in_mock_mode(self, config, fake_store, fake_llm,
                                                 security_workbook):
        fake_store.healthy = False
        with patch("rfp_assistant.assistant.create_vector_store", return_value=fake_store), \
                patch("rfp_assistant.assistant.create_llm_gateway", return_value=fake_llm):
            assistant = RFPAssistant.from_config(config)

        ingest = assistant.process_excel_rfp(security_workbook, {"rfp_id": "acme"})
        answer = assistant.query_rfp_data("Do you support SSO?")

        assert assistant.mock_mode is True
        assert ingest.mock_mode is True
        assert answer.mock_mode is True
        assert fake_store.calls == [("health", None)]

    def test_missing_configuration_is_fatal(self, monkeypatch, config):
        config.openai_api_key = ""

        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            RFPAssistant.from_config(config)

    def test_ingest_then_query_round(self, fake_store, fake_llm, security_workbook):
        assistant = RFPAssistant(fake_store, fake_llm, StoreAvailability.CONNECTED)

        result = assistant.process_excel_rfp(security_workbook, {"rfp_id": "acme"})
        stored = list(fake_store.vectors.values())

        assert result.stats.processed == 4
        assert {v["metadata"]["rfp_id"] for v in stored} == {"acme"}
        assert assistant.query_rfp_data("hello").sources == []


class TestCLI:

    def test_parse_meta(self):
        assert cli.parse_meta(["client=Acme", "region = EU"]) == {"client": "Acme", "region": "EU"}
        assert cli.parse_meta(None) == {}
        with pytest.raises(ValueError):
            cli.parse_meta(["broken"])

    def test_query_command_prints_json(self, monkeypatch, capsys, fake_store, fake_llm, config):
        assistant = RFPAssistant(fake_store, fake_llm, StoreAvailability.CONNECTED)
        monkeypatch.setattr("sys.argv", ["rfp-assistant", "query", "hi", "--json"])

        with patch.object(cli.RFPAssistant, "from_config", return_value=assistant):
            cli.main()

        output = json.loads(capsys.readouterr().out)
        assert output["sources"] == []
        assert "RFP Assistant" in output["answer"]

    def test_ingest_command(self, monkeypatch, capsys, tmp_path, fake_store, fake_llm, config,
                            security_workbook):
        workbook = tmp_path / "rfp.xlsx"
        workbook.write_bytes(security_workbook)
        assistant = RFPAssistant(fake_store, fake_llm, StoreAvailability.CONNECTED)
        monkeypatch.setattr("sys.argv", [
            "rfp-assistant", "ingest", str(workbook), "--rfp-id", "acme", "--meta", "client=Acme",
        ])

        with patch.object(cli.RFPAssistant, "from_config", return_value=assistant):
            cli.main()

        output = capsys.readouterr().out
        assert "Processed: 4" in output
        assert all(v["metadata"]["client"] == "Acme" for v in fake_store.vectors.values())

    def test_errors_exit_nonzero(self, monkeypatch, capsys, config):
        monkeypatch.setattr("sys.argv", ["rfp-assistant", "health"])

        with patch.object(cli.RFPAssistant, "from_config", side_effect=ValueError("Missing required")):
            with pytest.raises(SystemExit) as exc_info:
                cli.main()

        assert exc_info.value.code == 1
        assert "Missing required" in capsys.readouterr().err
