"""Source corpus discovery - which files may contain translation call sites."""
from pathlib import Path
from typing import Iterable, List

# Extensions scanned for call sites
SOURCE_EXTENSIONS = ('.ts', '.tsx', '.js', '.jsx', '.vue', '.svelte', '.html')

# Dependency / vendored / generated directories never scanned
EXCLUDED_DIRS = {
    'node_modules', 'bower_components', 'jspm_packages',
    'vendor', 'third_party', 'extern',
    'dist', 'build', 'out', 'coverage',
    '.git', '.hg', '.svn',
    '.next', '.nuxt', '.svelte-kit', '.turbo', '.cache',
    'venv', '.venv', 'env', '.virtualenv', 'site-packages', '.tox', '__pycache__',
    '.i18n_janitor_cache',
}


def is_excluded(path: Path, root: Path) -> bool:
    """True if any directory between root and path is a dependency directory."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part in EXCLUDED_DIRS for part in parts[:-1])


def discover_source_files(root: Path, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> List[Path]:
    """Enumerate candidate source files under a project root.

    Args:
        root: Project root directory
        extensions: File suffixes to include (case-insensitive)

    Returns:
        Sorted list of file paths, dependency directories excluded
    """
    root = Path(root).resolve()
    suffixes = {ext.lower() for ext in extensions}

    files = []
    for file_path in root.rglob('*'):
        if file_path.suffix.lower() not in suffixes:
            continue
        if is_excluded(file_path, root) or not file_path.is_file():
            continue
        files.append(file_path)

    return sorted(files)
