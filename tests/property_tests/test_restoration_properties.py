"""
Property-based tests for run invariants.

For any chain, any mix of succeeding, failing and crashing formatters, and
any cancellation point:
- The active-formatter setting after the run equals its value before it
- The recursion guard is free before and after the run
- A clean document is never touched
"""

from hypothesis import given, settings, strategies as st

from multiformatter.config.schema import KEY_DEFAULT_FORMATTER, SettingsScope, default_settings
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.base import ChainOptions, FormatterChain, SkipReason
from multiformatter.formatters.cancellation import CancellationToken
from multiformatter.formatters.errors import FormatterExecutionError
from multiformatter.formatters.executor import PipelineExecutor
from multiformatter.formatters.guard import RecursionGuard
from multiformatter.formatters.registry import FormatAction, FormatterRegistry
from multiformatter.host.document import TextDocument


# ============================================================================
# STRATEGIES
# ============================================================================

behaviour_strategy = st.sampled_from(["append", "upper", "identity", "step-error", "crash"])

chain_strategy = st.lists(behaviour_strategy, min_size=1, max_size=5)

original_value_strategy = st.one_of(st.none(), st.sampled_from(["multiformatter", "black", "prettier"]))

scope_layout_strategy = st.sampled_from(["global", "workspace", "folder"])


class HostCrash(Exception):
    """Failure of the host's format action itself, not of a formatter."""


def build_store(layout, original):
    workspace = {} if layout in ("workspace", "folder") else None
    folder = {} if layout == "folder" else None
    store = SettingsStore.from_dicts(
        global_values={"[python]": {KEY_DEFAULT_FORMATTER: "multiformatter"}},
        workspace_values=workspace,
        folder_values=folder,
        defaults=default_settings(),
    )
    if original is not None:
        store.update(KEY_DEFAULT_FORMATTER, original, store.narrowest_scope(), "python")
    return store


def build_executor(store, behaviours, guard):
    registry = FormatterRegistry()
    for index, behaviour in enumerate(behaviours):
        formatter_id = f"{behaviour}.{index}"
        if behaviour == "append":
            registry.register(formatter_id, lambda text: text + "+")
        elif behaviour == "upper":
            registry.register(formatter_id, lambda text: text.upper())
        elif behaviour == "identity":
            registry.register(formatter_id, lambda text: text)
        else:
            def fail(text, formatter_id=formatter_id):
                raise FormatterExecutionError(f"{formatter_id} failed", formatter_id=formatter_id)
            registry.register(formatter_id, fail)

    action = FormatAction(store, registry)

    def format_action(document):
        active = store.get(KEY_DEFAULT_FORMATTER, document.language_id)
        if active.startswith("crash."):
            raise HostCrash(active)
        return action(document)

    return PipelineExecutor(store, format_action, guard=guard, sleep=lambda seconds: None)


class TestRestorationProperties:

    @given(
        behaviours=chain_strategy,
        original=original_value_strategy,
        layout=scope_layout_strategy,
        cancel_at=st.one_of(st.none(), st.integers(min_value=0, max_value=5)),
        save_after_each=st.booleans(),
    )
    @settings(max_examples=150)
    def test_setting_restored_and_guard_released(self, behaviours, original, layout, cancel_at, save_after_each):
        store = build_store(layout, original)
        scope = store.narrowest_scope()
        before = store.inspect(KEY_DEFAULT_FORMATTER, scope, "python")
        guard = RecursionGuard()
        token = CancellationToken()
        executor = build_executor(store, behaviours, guard)
        ids = [f"{behaviour}.{index}" for index, behaviour in enumerate(behaviours)]

        if cancel_at is not None:
            writes = []

            def cancel_after_writes(event):
                writes.append(event)
                if len(writes) >= cancel_at:
                    token.cancel("property test")

            store.on_change(cancel_after_writes)

        assert not guard.is_held
        document = TextDocument("text", language_id="python", persisted_text="")

        result = executor.run(
            document,
            FormatterChain.of("python", ids),
            ChainOptions(formatter_delay_ms=0, save_after_each=save_after_each),
            token=token,
        )

        assert store.inspect(KEY_DEFAULT_FORMATTER, scope, "python") == before
        assert not guard.is_held
        if result.edits:
            assert result.edits[0].new_text == document.text
            assert document.text != "text"
        else:
            assert document.text == "text"

    @given(behaviours=chain_strategy, original=original_value_strategy)
    @settings(max_examples=50)
    def test_clean_document_is_never_touched(self, behaviours, original):
        store = build_store("workspace", original)
        events = []
        store.on_change(events.append)
        executor = build_executor(store, behaviours, RecursionGuard())
        document = TextDocument("formatted", language_id="python")

        result = executor.run(
            document,
            FormatterChain.of("python", [f"{b}.{i}" for i, b in enumerate(behaviours)]),
            ChainOptions(formatter_delay_ms=0),
        )

        assert result.skipped == SkipReason.NOT_DIRTY
        assert result.edits == []
        assert events == []
