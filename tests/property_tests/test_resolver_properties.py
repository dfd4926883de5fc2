"""
Property-based tests for chain resolution.

These tests validate:
- The orchestrator's own id never appears in a resolved chain
- A language outside a non-empty allow-list always resolves to an empty chain
- Configured formatter order is preserved after the default formatter
"""

from hypothesis import given, settings, strategies as st

from multiformatter.config.schema import (
    KEY_DEFAULT_FORMATTER,
    KEY_FORMATTERS,
    KEY_LANGUAGES,
    ORCHESTRATOR_ID,
    default_settings,
)
from multiformatter.config.store import SettingsStore
from multiformatter.formatters.resolver import SettingsResolver


# ============================================================================
# STRATEGIES
# ============================================================================

formatter_id_strategy = st.one_of(
    st.just(ORCHESTRATOR_ID),
    st.sampled_from(["black", "isort", "prettier", "eslint", "builtin.trimTrailingWhitespace"]),
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz.-", min_size=1, max_size=12),
)

formatter_list_strategy = st.lists(formatter_id_strategy, max_size=6)

language_strategy = st.sampled_from(
    ["python", "javascript", "typescript", "typescriptreact", "json", "css", "ruby"]
)

optional_default_strategy = st.one_of(st.none(), formatter_id_strategy)


def build_store(general, language_block, family_block, default, languages=None):
    values = {KEY_FORMATTERS: general}
    if languages is not None:
        values[KEY_LANGUAGES] = languages
    if default is not None:
        values[KEY_DEFAULT_FORMATTER] = default
    if language_block:
        values["[python]"] = {KEY_FORMATTERS: language_block}
    if family_block:
        values["[typescript]"] = {KEY_FORMATTERS: family_block}
    return SettingsStore.from_dicts(global_values=values, defaults=default_settings())


class TestResolverProperties:

    @given(
        general=formatter_list_strategy,
        language_block=formatter_list_strategy,
        family_block=formatter_list_strategy,
        default=optional_default_strategy,
        language=language_strategy,
    )
    @settings(max_examples=100)
    def test_chain_never_contains_orchestrator(self, general, language_block, family_block, default, language):
        store = build_store(general, language_block, family_block, default)

        chain = SettingsResolver(store).resolve(language)

        assert ORCHESTRATOR_ID not in chain.formatter_ids

    @given(
        general=formatter_list_strategy,
        default=optional_default_strategy,
        allowed=st.lists(language_strategy, min_size=1, max_size=3, unique=True),
        language=language_strategy,
    )
    @settings(max_examples=100)
    def test_language_outside_allow_list_gets_no_steps(self, general, default, allowed, language):
        store = build_store(general, [], [], default, languages=allowed)
        resolver = SettingsResolver(store)

        chain = resolver.resolve(language)

        family = resolver.family_of(language)
        if language not in allowed and family not in allowed:
            assert len(chain) == 0

    @given(
        general=formatter_list_strategy,
        language_block=formatter_list_strategy,
        default=optional_default_strategy,
    )
    @settings(max_examples=100)
    def test_order_is_default_then_configured(self, general, language_block, default):
        store = build_store(general, language_block, [], default)

        chain = SettingsResolver(store).resolve("python")

        expected = [] if default in (None, ORCHESTRATOR_ID) else [default]
        configured = [f for f in language_block if f != ORCHESTRATOR_ID]
        if not configured:
            configured = [f for f in general if f != ORCHESTRATOR_ID]
        assert chain.formatter_ids == expected + configured
