"""Test credential stores and the session context"""

import json
import os
import stat

import pytest

from conftest import FailingCredentialStore
from gogomedia.core.exceptions import CredentialStoreError
from gogomedia.session.context import SessionContext
from gogomedia.storage.credentials import (
    TOKEN_KEY,
    USERNAME_KEY,
    JsonFileCredentialStore,
    MemoryCredentialStore,
)


class TestMemoryCredentialStore:

    def test_get_set_remove(self):
        store = MemoryCredentialStore()

        assert store.get(TOKEN_KEY) is None
        store.set(TOKEN_KEY, "T1")
        assert store.get(TOKEN_KEY) == "T1"
        store.remove(TOKEN_KEY)
        assert store.get(TOKEN_KEY) is None

    def test_remove_missing_key_is_ignored(self):
        MemoryCredentialStore().remove("nothing")


class TestJsonFileCredentialStore:

    def test_values_survive_a_new_instance(self, temp_dir):
        path = temp_dir / "nested" / "credentials.json"
        store = JsonFileCredentialStore(path)
        store.set(TOKEN_KEY, "T1")
        store.set(USERNAME_KEY, "alice")

        reopened = JsonFileCredentialStore(path)

        assert reopened.get(TOKEN_KEY) == "T1"
        assert reopened.get(USERNAME_KEY) == "alice"

    def test_remove_is_persisted(self, temp_dir):
        path = temp_dir / "credentials.json"
        store = JsonFileCredentialStore(path)
        store.set(TOKEN_KEY, "T1")
        store.remove(TOKEN_KEY)

        assert json.loads(path.read_text(encoding="utf-8")) == {}
        assert JsonFileCredentialStore(path).get(TOKEN_KEY) is None

    @pytest.mark.skipif(os.name != "posix", reason="file modes are POSIX only")
    def test_file_is_owner_only(self, temp_dir):
        """Test credential file permissions"""
        path = temp_dir / "credentials.json"
        JsonFileCredentialStore(path).set(TOKEN_KEY, "T1")

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_corrupt_file_starts_empty(self, temp_dir):
        path = temp_dir / "credentials.json"
        path.write_text("{not json", encoding="utf-8")

        store = JsonFileCredentialStore(path)

        assert store.get(TOKEN_KEY) is None

    def test_failed_write_keeps_previous_value(self, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        store = JsonFileCredentialStore(blocker / "credentials.json")

        with pytest.raises(CredentialStoreError):
            store.set(TOKEN_KEY, "T1")

        assert store.get(TOKEN_KEY) is None


class TestSessionContext:

    def test_create_resumes_stored_session(self, logged_in_store):
        context = SessionContext.create(logged_in_store)

        assert context.is_active
        assert context.username == "alice"
        assert context.auth_token == "T1"
        assert context.media is None

    def test_create_without_session(self, store):
        context = SessionContext.create(store)

        assert not context.is_active
        assert context.username == ""
        assert context.auth_token == ""

    def test_half_stored_session_is_inactive(self):
        context = SessionContext.create(MemoryCredentialStore({TOKEN_KEY: "T1"}))

        assert not context.is_active
        assert context.auth_token == ""

    def test_establish_and_reset(self, store, song_a):
        context = SessionContext.create(store)
        context.establish("alice", "T1")
        context.media = [song_a]

        assert store.get(TOKEN_KEY) == "T1"
        assert store.get(USERNAME_KEY) == "alice"

        context.reset()

        assert not context.is_active
        assert store.get(TOKEN_KEY) is None
        assert store.get(USERNAME_KEY) is None
        assert context.username == ""
        assert context.media is None

    def test_establish_drops_previous_cache(self, logged_in_store, song_a):
        context = SessionContext.create(logged_in_store)
        context.media = [song_a]

        context.establish("bob", "T2")

        assert context.media is None
        assert context.username == "bob"

    def test_destroy_keeps_stored_session(self, logged_in_store):
        context = SessionContext.create(logged_in_store)

        context.destroy()

        assert context.destroyed
        assert context.username == ""
        assert logged_in_store.get(TOKEN_KEY) == "T1"

    def test_reset_tries_every_key(self, song_a):
        """Test that one failed removal does not stop the other"""
        store = FailingCredentialStore(
            {TOKEN_KEY: "T1", USERNAME_KEY: "alice"}, remove_fails={TOKEN_KEY}
        )
        context = SessionContext.create(store)
        context.media = [song_a]

        with pytest.raises(CredentialStoreError):
            context.reset()

        assert store.get(USERNAME_KEY) is None
        assert not context.is_active
        assert context.auth_token == ""
        assert context.media is None
