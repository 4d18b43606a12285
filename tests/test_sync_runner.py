from unittest.mock import MagicMock

import pytest

from shared.clients.rag.RAGClientInterface import RAGClientInterface
from sync import sync_runner


@pytest.fixture
def runner_env(monkeypatch, tmp_path):
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    monkeypatch.setenv("SYNC_DATASET_IDS", "[ds-remote]")


@pytest.fixture
def fake_client(monkeypatch) -> MagicMock:
    client = MagicMock(spec=RAGClientInterface)
    client.get_engine_name.return_value = "ragflow"
    manager = MagicMock()
    manager.return_value.get_client.return_value = client
    monkeypatch.setattr(sync_runner, "RAGClientManager", manager)
    return client


def test_mirrors_configured_datasets(runner_env, fake_client):
    fake_client.do_fetch_documents.return_value = [{"id": "doc-1", "name": "a.pdf", "run": "DONE"}]
    fake_client.do_fetch_chunks.return_value = [{"id": "c-1", "content": "hello"}]

    sync_runner.main()

    fake_client.boot.assert_called_once()
    fake_client.do_fetch_chunks.assert_called_once_with("ds-remote", "doc-1")
    fake_client.do_fetch_parse_status.assert_not_called()
    fake_client.close.assert_called_once()


def test_aborts_when_healthcheck_fails(runner_env, fake_client):
    fake_client.do_healthcheck.side_effect = RuntimeError("unreachable")

    sync_runner.main()

    fake_client.do_fetch_documents.assert_not_called()
    fake_client.close.assert_called_once()
