"""End-to-end tests for the i18n-janitor command line."""
import asyncio
import io

from rich.console import Console
from typer.testing import CliRunner

from i18n_janitor import main as main_module
from i18n_janitor.analyzer.reconciler import UsageReconciler
from i18n_janitor.main import app

runner = CliRunner()


class TestUnused:
    """i18n-janitor unused"""

    def test_reports_unused_leaves(self, project):
        result = runner.invoke(app, ['unused', str(project), '--no-cache'])
        assert result.exit_code == 0, result.output
        assert 'Scanned:' in result.output
        assert 'common.cancel' in result.output
        assert 'dashboard.subtitle' in result.output
        assert 'unusedTop' in result.output
        assert 'dashboard.title' not in result.output
        assert 'errors.notFound' not in result.output
        assert 'dashboard.widgets' not in result.output

    def test_strict_exit_code(self, project):
        result = runner.invoke(app, ['unused', str(project), '--no-cache', '--strict'])
        assert result.exit_code == 1

    def test_all_locales(self, project):
        result = runner.invoke(app, ['unused', str(project), '--no-cache', '--all'])
        assert result.exit_code == 0, result.output
        assert 'Unused Keys (en)' in result.output
        assert 'Unused Keys (de)' in result.output

    def test_missing_locale_file(self, project):
        result = runner.invoke(app, ['unused', str(project), '--no-cache', '--locale', 'fr'])
        assert result.exit_code == 0
        assert 'Locale file not found' in result.output

    def test_dependency_directories_not_scanned(self, project):
        # node_modules/ui-kit uses common.cancel; it must still be reported
        result = runner.invoke(app, ['unused', str(project), '--no-cache', '--locale', 'de'])
        assert 'common.cancel' in result.output

    def test_populates_cache(self, project):
        runner.invoke(app, ['unused', str(project)])
        result = runner.invoke(app, ['cache', 'stats', str(project)])
        assert result.exit_code == 0
        assert 'Files Cached' in result.output
        assert (project / '.i18n_janitor_cache' / 'scan.db').exists()

    def test_disabled_project(self, project, monkeypatch):
        monkeypatch.setenv('I18N_ENABLED', 'false')
        result = runner.invoke(app, ['unused', str(project)])
        assert result.exit_code == 1
        assert 'disabled' in result.output

    def test_invalid_enabled_value(self, project, monkeypatch):
        monkeypatch.setenv('I18N_ENABLED', 'sometimes')
        result = runner.invoke(app, ['unused', str(project)])
        assert result.exit_code == 1

    def test_missing_project(self, tmp_path):
        result = runner.invoke(app, ['unused', str(tmp_path / 'nowhere')])
        assert result.exit_code == 1


class TestLocate:
    """i18n-janitor locate"""

    def test_default_locale(self, project):
        result = runner.invoke(app, ['locate', 'dashboard.title', str(project)])
        assert result.exit_code == 0, result.output
        assert 'en.json' in result.output
        assert 'de.json' not in result.output

    def test_all_locales(self, project):
        result = runner.invoke(app, ['locate', 'common.save', str(project), '--all'])
        assert result.exit_code == 0, result.output
        assert 'en.json' in result.output
        assert 'de.json' in result.output

    def test_missing_key(self, project):
        result = runner.invoke(app, ['locate', 'nope.nothing', str(project)])
        assert result.exit_code == 1
        assert 'not found' in result.output


class TestKeyAt:
    """i18n-janitor key-at"""

    def test_scoped_key(self, project):
        source = project / 'src' / 'components' / 'Dashboard.tsx'
        line = source.read_text(encoding='utf-8').split('\n')[7]
        column = line.index('save') + 1

        result = runner.invoke(app, ['key-at', str(source), '8', str(column), '--project', str(project)])
        assert result.exit_code == 0, result.output
        assert 'common.save' in result.output
        assert 'en.json:4:6' in result.output

    def test_no_key_at_cursor(self, project):
        source = project / 'src' / 'components' / 'Dashboard.tsx'
        result = runner.invoke(app, ['key-at', str(source), '1', '1', '--project', str(project)])
        assert result.exit_code == 1
        assert 'No translation key' in result.output


class TestKeyPath:
    """i18n-janitor key-path"""

    def test_offset_on_key(self, project):
        locale_file = project / 'locales' / 'en.json'
        offset = locale_file.read_text(encoding='utf-8').index('"subtitle"') + 1
        result = runner.invoke(app, ['key-path', str(locale_file), str(offset)])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == 'dashboard.subtitle'

    def test_offset_on_value(self, project):
        locale_file = project / 'locales' / 'en.json'
        offset = locale_file.read_text(encoding='utf-8').index('Overview')
        result = runner.invoke(app, ['key-path', str(locale_file), str(offset)])
        assert result.exit_code == 1


class TestComplete:
    """i18n-janitor complete"""

    def test_children_suggested(self, project):
        source = project / 'src' / 'draft.ts'
        line = 'const label = t("dashboard.'
        source.write_text(line + '\n', encoding='utf-8')

        result = runner.invoke(app, ['complete', str(source), '1', str(len(line) + 1), '--project', str(project)])
        assert result.exit_code == 0, result.output
        assert 'subtitle' in result.output
        assert 'Overview' in result.output

    def test_outside_call(self, project):
        source = project / 'src' / 'draft.ts'
        source.write_text('const label = 1;\n', encoding='utf-8')
        result = runner.invoke(app, ['complete', str(source), '1', '5', '--project', str(project)])
        assert result.exit_code == 1


class TestLocales:
    """i18n-janitor locales"""

    def test_lists_configured_locales(self, project):
        result = runner.invoke(app, ['locales', str(project)])
        assert result.exit_code == 0, result.output
        for locale in ('EN', 'DE', 'FR'):
            assert locale in result.output
        assert 'missing' in result.output


class TestInit:
    """i18n-janitor init"""

    def test_writes_env_file(self, tmp_path):
        result = runner.invoke(app, ['init', str(tmp_path), '--naming', 'locale/common.json'])
        assert result.exit_code == 0, result.output
        env_text = (tmp_path / '.env').read_text(encoding='utf-8')
        assert 'I18N_FILE_NAMING=locale/common.json' in env_text

    def test_prompts_for_layout(self, tmp_path):
        result = runner.invoke(app, ['init', str(tmp_path)], input='locale/index.json\n')
        assert result.exit_code == 0, result.output
        assert 'I18N_FILE_NAMING=locale/index.json' in (tmp_path / '.env').read_text(encoding='utf-8')

    def test_refuses_to_overwrite(self, project):
        result = runner.invoke(app, ['init', str(project), '--naming', 'locale.json'])
        assert result.exit_code == 1
        assert 'exists' in result.output

    def test_invalid_layout(self, tmp_path):
        result = runner.invoke(app, ['init', str(tmp_path), '--naming', 'flat.yaml'])
        assert result.exit_code == 1
        assert not (tmp_path / '.env').exists()


class TestCacheCommands:
    """i18n-janitor cache"""

    def test_clear(self, project):
        runner.invoke(app, ['unused', str(project)])
        result = runner.invoke(app, ['cache', 'clear', str(project)])
        assert result.exit_code == 0
        assert 'Cache cleared' in result.output


class TestWatchReports:
    """Reports printed by watch mode."""

    def test_locale_edit_before_first_pass_is_silent(self, project, monkeypatch):
        output = io.StringIO()
        monkeypatch.setattr(main_module, 'console', Console(file=output, width=120))
        locale_path = project / 'locales' / 'en.json'
        reconciler = UsageReconciler(lambda: [], ['t'])

        main_module._report_locale_change(reconciler, locale_path, project)
        assert output.getvalue() == ''
        assert reconciler.documents == {}

        asyncio.run(reconciler.recompute())
        main_module._report_locale_change(reconciler, locale_path, project)
        assert 'common.cancel' in output.getvalue()
