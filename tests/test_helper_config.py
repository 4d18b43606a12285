import pytest


def test_string_value_falls_back_to_default(helper_config, monkeypatch):
    monkeypatch.delenv("RAG_ENGINE", raising=False)
    assert helper_config.get_string_val("RAG_ENGINE", default="ragflow") == "ragflow"

    monkeypatch.setenv("RAG_ENGINE", "  ragflow  ")
    assert helper_config.get_string_val("rag_engine") == "ragflow"


def test_missing_value_without_default_raises(helper_config, monkeypatch):
    monkeypatch.delenv("RAG_RAGFLOW_BASE_URL", raising=False)

    with pytest.raises(ValueError):
        helper_config.get_string_val("RAG_RAGFLOW_BASE_URL")


def test_number_value(helper_config, monkeypatch):
    monkeypatch.setenv("RAG_TIMEOUT", "12.5")
    monkeypatch.setenv("RAG_RAGFLOW_RETRIES", "4")

    assert helper_config.get_number_val("RAG_TIMEOUT") == 12.5
    assert helper_config.get_number_val("RAG_RAGFLOW_RETRIES") == 4

    monkeypatch.setenv("RAG_RAGFLOW_RETRIES", "many")
    with pytest.raises(ValueError):
        helper_config.get_number_val("RAG_RAGFLOW_RETRIES")


@pytest.mark.parametrize("raw, expected", [("true", True), ("1", True), ("Yes", True), ("off", False)])
def test_bool_value(helper_config, monkeypatch, raw, expected):
    monkeypatch.setenv("SYNC_DRY_RUN", raw)
    assert helper_config.get_bool_val("SYNC_DRY_RUN") is expected


def test_list_value(helper_config, monkeypatch):
    monkeypatch.setenv("SYNC_DATASET_IDS", "[ds_1, ds_2,,]")
    assert helper_config.get_list_val("SYNC_DATASET_IDS") == ["ds_1", "ds_2"]

    monkeypatch.setenv("SYNC_DATASET_IDS", "ds_1,ds_2")
    with pytest.raises(ValueError):
        helper_config.get_list_val("SYNC_DATASET_IDS")

    monkeypatch.delenv("SYNC_DATASET_IDS")
    assert helper_config.get_list_val("SYNC_DATASET_IDS", default=[]) == []


def test_typed_value_dispatches_on_declared_type(helper_config, monkeypatch):
    monkeypatch.setenv("RAG_RAGFLOW_RETRIES", "3")
    monkeypatch.setenv("RAG_RAGFLOW_VERIFY", "yes")
    monkeypatch.delenv("RAG_RAGFLOW_TAGS", raising=False)

    assert helper_config.get_typed_val("RAG_RAGFLOW_RETRIES", val_type="number") == 3
    assert helper_config.get_typed_val("RAG_RAGFLOW_VERIFY", val_type="bool") is True
    assert helper_config.get_typed_val("RAG_RAGFLOW_TAGS", val_type="list", default=[]) == []

    with pytest.raises(ValueError):
        helper_config.get_typed_val("RAG_RAGFLOW_RETRIES", val_type="json")


def test_dataset_ids_keep_order_without_duplicates(helper_config, monkeypatch):
    monkeypatch.setenv("SYNC_DATASET_IDS", "[ds_2, ds_1, ds_2]")
    assert helper_config.get_dataset_ids() == ["ds_2", "ds_1"]

    monkeypatch.setenv("SYNC_DATASET_IDS", "   ")
    assert helper_config.get_dataset_ids() == []
