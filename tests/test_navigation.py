"""Tests for go-to-definition and key completion against the fixture project."""
from pathlib import Path

import pytest

from i18n_janitor.analyzer.completion import KeySuggestion, completion_context, suggest_keys
from i18n_janitor.analyzer.navigation import find_definition, find_definitions, resolve_key_at
from i18n_janitor.config import Config

FIXTURE_PROJECT = Path(__file__).parent / 'fixtures' / 'project'
NAMES = ['t', 'i18n.t']
DASHBOARD = (FIXTURE_PROJECT / 'src' / 'components' / 'Dashboard.tsx').read_text(encoding='utf-8')
EN = (FIXTURE_PROJECT / 'locales' / 'en.json').read_text(encoding='utf-8')


@pytest.fixture
def config():
    """Config of the fixture project."""
    return Config(FIXTURE_PROJECT)


class TestResolveKeyAt:
    """Cursor -> fully qualified key."""

    def test_scoped_call(self):
        line = DASHBOARD.split('\n')[7]
        assert resolve_key_at(DASHBOARD, 7, line.index('save'), NAMES) == 'common.save'

    def test_scope_applied_to_every_call_below(self):
        line = DASHBOARD.split('\n')[6]
        key = resolve_key_at(DASHBOARD, 6, line.index('dashboard'), NAMES)
        assert key == 'common.dashboard.title'

    def test_segment_only(self):
        line = DASHBOARD.split('\n')[6]
        cursor = line.index('dashboard') + 2
        assert resolve_key_at(DASHBOARD, 6, cursor, NAMES, segment_only=True) == 'common.dashboard'

    def test_not_on_call_site(self):
        assert resolve_key_at(DASHBOARD, 2, 3, NAMES) is None

    def test_line_out_of_range(self):
        assert resolve_key_at(DASHBOARD, 500, 0, NAMES) is None
        assert resolve_key_at(DASHBOARD, -1, 0, NAMES) is None

    def test_unscoped_file(self):
        text = "return i18n.t('errors.notFound');"
        assert resolve_key_at(text, 0, text.index('errors'), NAMES) == 'errors.notFound'


class TestFindDefinition:
    """Key -> locale file position."""

    def test_default_locale(self, config):
        definition = find_definition(config, 'common.save')
        assert definition.locale == 'en'
        assert definition.path == FIXTURE_PROJECT.resolve() / 'locales' / 'en.json'
        assert (definition.position.line, definition.position.character) == (3, 5)

    def test_explicit_locale(self, config):
        definition = find_definition(config, 'dashboard.title', 'de')
        assert definition.position.line == 6

    def test_missing_key(self, config):
        assert find_definition(config, 'dashboard.subtitle', 'de') is None

    def test_missing_locale_file(self, config):
        assert find_definition(config, 'common.save', 'fr') is None

    def test_every_locale(self, config):
        definitions = find_definitions(config, 'common.save')
        assert [definition.locale for definition in definitions] == ['en', 'de']

    def test_key_only_in_default_locale(self, config):
        definitions = find_definitions(config, 'unusedTop')
        assert [definition.locale for definition in definitions] == ['en']


class TestCompletionContext:
    """Is the cursor inside an open translation call?"""

    def test_partial_key(self):
        assert completion_context('  {t("dash', NAMES) == 'dash'

    def test_just_opened(self):
        assert completion_context("i18n.t('", NAMES) == ''

    def test_dotted_partial(self):
        assert completion_context("i18n.t('errors.", NAMES) == 'errors.'

    def test_outside_call(self):
        assert completion_context('const x = 1', NAMES) is None
        assert completion_context('t("done") + ', NAMES) is None


class TestSuggestKeys:
    """Children of the addressed object."""

    def test_top_level(self):
        names = [suggestion.name for suggestion in suggest_keys(EN, '')]
        assert names == ['common', 'dashboard', 'errors', 'unusedTop']

    def test_filter_by_typed_prefix(self):
        assert suggest_keys(EN, 'dash') == [
            KeySuggestion('dashboard', True, {
                'title': 'Dashboard',
                'subtitle': 'Overview',
                'widgets': ['clock', 'weather'],
            }),
        ]

    def test_container_insert_text(self):
        suggestion = suggest_keys(EN, 'err')[0]
        assert suggestion.insert_text == 'errors.'

    def test_children_after_dot(self):
        suggestions = suggest_keys(EN, 'dashboard.')
        assert [suggestion.name for suggestion in suggestions] == ['title', 'subtitle', 'widgets']
        assert [suggestion.is_container for suggestion in suggestions] == [False, False, False]
        assert suggestions[0].insert_text == 'title'

    def test_filter_last_segment(self):
        assert [suggestion.name for suggestion in suggest_keys(EN, 'dashboard.t')] == ['title']

    def test_scope_with_nothing_typed(self):
        suggestions = suggest_keys(EN, '', 'common')
        assert [(suggestion.name, suggestion.value) for suggestion in suggestions] == [
            ('save', 'Save'),
            ('cancel', 'Cancel'),
        ]

    def test_scope_with_partial_key(self):
        assert [suggestion.name for suggestion in suggest_keys(EN, 'c', 'common')] == ['cancel']

    def test_invalid_path(self):
        assert suggest_keys(EN, 'missing.') == []
        assert suggest_keys(EN, 'unusedTop.') == []

    def test_malformed_locale(self):
        assert suggest_keys('{"a": ', '') == []
