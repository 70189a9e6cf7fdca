"""Tests for source corpus discovery and terminal-safe output."""
from i18n_janitor.analyzer.corpus import discover_source_files, is_excluded
from i18n_janitor.utils import logger as logger_module


class TestDiscoverSourceFiles:
    """Which files are scanned."""

    def test_fixture_project(self, project):
        files = discover_source_files(project)
        relative = [path.relative_to(project.resolve()).as_posix() for path in files]
        assert relative == ['src/components/Dashboard.tsx', 'src/errors.js']

    def test_extension_filter(self, tmp_path):
        (tmp_path / 'a.svelte').write_text('', encoding='utf-8')
        (tmp_path / 'b.HTML').write_text('', encoding='utf-8')
        (tmp_path / 'c.py').write_text('', encoding='utf-8')
        names = [path.name for path in discover_source_files(tmp_path)]
        assert names == ['a.svelte', 'b.HTML']

    def test_custom_extensions(self, tmp_path):
        (tmp_path / 'a.ts').write_text('', encoding='utf-8')
        (tmp_path / 'b.mjs').write_text('', encoding='utf-8')
        assert [path.name for path in discover_source_files(tmp_path, ['.mjs'])] == ['b.mjs']

    def test_is_excluded(self, tmp_path):
        assert is_excluded(tmp_path / 'dist' / 'bundle.js', tmp_path)
        assert is_excluded(tmp_path / 'a' / 'node_modules' / 'x.js', tmp_path)
        assert not is_excluded(tmp_path / 'src' / 'dist.js', tmp_path)


class TestSanitizeForTerminal:
    """Icon fallback for legacy terminals."""

    def test_ascii_terminal(self, monkeypatch):
        monkeypatch.setattr(logger_module, 'is_utf8_capable', lambda: False)
        assert logger_module.sanitize_for_terminal('✓ done → next') == '[OK] done -> next'

    def test_utf8_terminal(self, monkeypatch):
        monkeypatch.setattr(logger_module, 'is_utf8_capable', lambda: True)
        assert logger_module.sanitize_for_terminal('✓ done') == '✓ done'

    def test_get_logger_namespace(self):
        log = logger_module.get_logger('i18n_janitor.analyzer.usage')
        assert log.name == 'i18n_janitor.analyzer.usage'
