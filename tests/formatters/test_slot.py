"""
Tests for the active-formatter slot and activation confirmation.
"""

import pytest
from unittest.mock import MagicMock

from multiformatter.config.schema import KEY_DEFAULT_FORMATTER, SettingsScope
from multiformatter.config.store import SettingsLayer, SettingsStore
from multiformatter.formatters.base import ChainOptions
from multiformatter.formatters.errors import SettingsError
from multiformatter.formatters.slot import ActiveFormatterSlot, PollingActivationConfirmer


class TestActiveFormatterSlot:

    def test_uses_narrowest_scope(self, make_store):
        store = make_store(workspace_values={}, folder_values={})
        assert ActiveFormatterSlot(store, "python").scope == SettingsScope.WORKSPACE_FOLDER

    def test_restores_raw_value_not_effective_value(self, make_store):
        store = make_store(
            global_values={"[python]": {KEY_DEFAULT_FORMATTER: "multiformatter"}},
            workspace_values={},
        )
        slot = ActiveFormatterSlot(store, "python")

        with slot.owned():
            assert slot.original is None
            slot.activate("black")
            assert store.get(KEY_DEFAULT_FORMATTER, "python") == "black"

        assert store.inspect(KEY_DEFAULT_FORMATTER, SettingsScope.WORKSPACE, "python") is None
        assert store.layer(SettingsScope.WORKSPACE).values == {}
        assert store.get(KEY_DEFAULT_FORMATTER, "python") == "multiformatter"

    def test_restores_existing_value(self, make_store):
        store = make_store(global_values={"[python]": {KEY_DEFAULT_FORMATTER: "multiformatter"}})
        slot = ActiveFormatterSlot(store, "python")

        with slot.owned():
            slot.activate("isort")

        assert store.inspect(KEY_DEFAULT_FORMATTER, SettingsScope.GLOBAL, "python") == "multiformatter"

    def test_restores_when_block_raises(self, make_store):
        store = make_store(global_values={"[python]": {KEY_DEFAULT_FORMATTER: "yapf"}})
        slot = ActiveFormatterSlot(store, "python")

        with pytest.raises(RuntimeError):
            with slot.owned():
                slot.activate("black")
                raise RuntimeError("formatter crashed")

        assert store.get(KEY_DEFAULT_FORMATTER, "python") == "yapf"

    def test_failed_restore_is_recorded_not_raised(self, make_store, caplog):
        store = make_store()
        slot = ActiveFormatterSlot(store, "python")
        with slot.owned():
            slot.activate("black")
            store.update = MagicMock(side_effect=SettingsError("disk full"))

        assert isinstance(slot.restore_error, SettingsError)
        assert "Failed to restore default formatter" in caplog.text

    def test_restore_without_capture_does_nothing(self, make_store):
        store = make_store()
        store.update = MagicMock()

        ActiveFormatterSlot(store, "python").restore()

        store.update.assert_not_called()

    def test_settings_file_restored_as_written(self, tmp_path):
        path = tmp_path / ".multiformatter" / "settings.yaml"
        path.parent.mkdir()
        original = (
            b"# team formatter settings\n"
            b'"[python]":\n'
            b"  editor.defaultFormatter: multiformatter  # run the chain\n"
        )
        path.write_bytes(original)
        layer = SettingsLayer(
            SettingsScope.WORKSPACE,
            {"[python]": {KEY_DEFAULT_FORMATTER: "multiformatter"}},
            path,
            existed=True,
        )
        store = SettingsStore([layer])

        with ActiveFormatterSlot(store, "python").owned() as slot:
            slot.activate("black")
            assert b"black" in path.read_bytes()

        assert path.read_bytes() == original
        assert store.get(KEY_DEFAULT_FORMATTER, "python") == "multiformatter"

    def test_file_left_alone_when_other_settings_changed(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_bytes(b"# mine\neditor.formatOnSave: false\n")
        layer = SettingsLayer(SettingsScope.GLOBAL, {"editor.formatOnSave": False}, path, existed=True)
        store = SettingsStore([layer])

        with ActiveFormatterSlot(store, "python").owned() as slot:
            slot.activate("black")
            store.update("editor.formatOnSave", True, SettingsScope.GLOBAL)

        assert store.layer(SettingsScope.GLOBAL).values == {"editor.formatOnSave": True}
        assert b"formatOnSave: true" in path.read_bytes()

    def test_logs_scope_and_original_value(self, make_store, caplog):
        caplog.set_level("INFO")
        store = make_store(workspace_values={"[python]": {KEY_DEFAULT_FORMATTER: "black"}})

        with ActiveFormatterSlot(store, "python").owned():
            pass

        assert "Using Workspace scope for [python]" in caplog.text
        assert "Original default formatter: black" in caplog.text
        assert "Restored default formatter: black" in caplog.text


class TestPollingActivationConfirmer:

    def test_confirms_immediately_when_active(self, make_store, no_sleep):
        store = make_store(global_values={"[python]": {KEY_DEFAULT_FORMATTER: "black"}})
        confirmer = PollingActivationConfirmer(store, sleep=no_sleep)

        assert confirmer.wait("black", "python", ChainOptions())
        assert no_sleep.calls == []

    def test_gives_up_after_attempts(self, make_store, no_sleep, caplog):
        store = make_store()
        confirmer = PollingActivationConfirmer(store, sleep=no_sleep)

        assert not confirmer.wait("black", "python", ChainOptions())
        assert no_sleep.calls == [0.1] * 4
        assert "was not confirmed active" in caplog.text

    def test_confirms_once_host_catches_up(self, make_store):
        store = make_store()
        polls = []

        def sleep(seconds):
            polls.append(seconds)
            if len(polls) == 2:
                store.update(KEY_DEFAULT_FORMATTER, "black", SettingsScope.GLOBAL, "python")

        confirmer = PollingActivationConfirmer(store, sleep=sleep)

        assert confirmer.wait("black", "python", ChainOptions(activation_interval_ms=20))
        assert polls == [0.02, 0.02]
