"""
Tests for Credential Store and Key-Value Stores

Tests credential group resolution, persistence through the backing store
and the JSON file store's durability.
"""

import json

import pytest

from transcription import (
    CREDENTIAL_GROUPS,
    CredentialStore,
    DEFAULT_MODELS,
    JsonFileStore,
    MemoryStore,
    ModelFamily,
    ModelRegistry,
    StoreError,
    TranscriptionModel,
)


def model(model_id: str, requires_credential: bool = True) -> TranscriptionModel:
    return TranscriptionModel(
        id=model_id,
        display_name=model_id,
        description="",
        family=ModelFamily.SPEECH_API,
        provider="test",
        requires_credential=requires_credential,
    )


class TestCredentialStore:
    """Tests for CredentialStore."""

    def test_no_credential_needed_is_configured(self):
        """Models without a credential requirement are always configured."""
        store = CredentialStore(MemoryStore())
        for entry in DEFAULT_MODELS:
            if not entry.requires_credential:
                assert store.is_configured(entry) is True

    def test_missing_credential_not_configured(self):
        store = CredentialStore(MemoryStore())
        for entry in DEFAULT_MODELS:
            if entry.requires_credential:
                assert store.is_configured(entry) is False

    def test_group_shared_by_models(self):
        """Setting a group's secret configures every member model."""
        g1, g2 = model("g1"), model("g2")
        store = CredentialStore(MemoryStore(), groups={"g1": "g", "g2": "g"})

        assert store.set_credential("g", "secret") is True

        assert store.is_configured(g1)
        assert store.is_configured(g2)
        assert store.credential_for(g1) == "secret"

    def test_model_id_is_default_group(self):
        store = CredentialStore(MemoryStore(), groups={})
        assert store.credential_group(model("assemblyai")) == "assemblyai"

    def test_gemini_variants_share_key(self):
        registry = ModelRegistry()
        store = CredentialStore(MemoryStore())
        store.set_credential("gemini", "AIza-test")

        gemini = [m for m in registry.list_models() if m.provider == "gemini"]
        assert gemini
        assert all(store.is_configured(m) for m in gemini)
        assert not store.is_configured(registry.get_model("openai-whisper"))

    def test_groq_group(self):
        assert CREDENTIAL_GROUPS["groq-whisper-v3-turbo"] == "groq"
        assert CREDENTIAL_GROUPS["groq-distil-whisper"] == "groq"

    def test_set_credential_writes_through(self):
        backing = MemoryStore()
        CredentialStore(backing).set_credential("openai", "sk-test")
        assert backing.get("api_key.openai") == "sk-test"

    def test_overwrite(self):
        store = CredentialStore(MemoryStore())
        store.set_credential("openai", "old")
        store.set_credential("openai", "new")
        assert store.get_credential("openai") == "new"

    def test_secret_is_stripped(self):
        store = CredentialStore(MemoryStore())
        store.set_credential("openai", "  sk-test\n")
        assert store.get_credential("openai") == "sk-test"

    def test_empty_secret_rejected(self):
        store = CredentialStore(MemoryStore())
        with pytest.raises(ValueError):
            store.set_credential("openai", "   ")
        with pytest.raises(ValueError):
            store.set_credential("", "secret")

    def test_get_missing_credential(self):
        assert CredentialStore(MemoryStore()).get_credential("nobody") is None

    def test_secret_not_logged(self, caplog):
        caplog.set_level("DEBUG")
        CredentialStore(MemoryStore()).set_credential("openai", "sk-very-secret")
        assert "sk-very-secret" not in caplog.text


class TestJsonFileStore:
    """Tests for JsonFileStore."""

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "settings.json")
        assert store.get("anything") is None

    def test_value_visible_to_new_instance(self, tmp_path):
        """A completed set is durable for later processes."""
        path = tmp_path / "nested" / "settings.json"
        JsonFileStore(path).set("api_key.groq", "gsk-test")

        assert JsonFileStore(path).get("api_key.groq") == "gsk-test"
        assert json.loads(path.read_text()) == {"api_key.groq": "gsk-test"}

    def test_no_temp_files_left(self, tmp_path):
        path = tmp_path / "settings.json"
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("b", "2")
        assert [p.name for p in tmp_path.iterdir()] == ["settings.json"]

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("{not json")
        with pytest.raises(StoreError):
            JsonFileStore(path)

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        with pytest.raises(StoreError):
            JsonFileStore(path)

    def test_credential_store_over_file(self, tmp_path):
        path = tmp_path / "settings.json"
        CredentialStore(JsonFileStore(path)).set_credential("deepgram", "dg-key")
        assert CredentialStore(JsonFileStore(path)).get_credential("deepgram") == "dg-key"
