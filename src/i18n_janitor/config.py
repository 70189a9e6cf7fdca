"""Configuration management for i18n-janitor.

Loads environment variables (optionally from a project .env file) and
provides centralized config access.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import dotenv_values

from .analyzer.corpus import SOURCE_EXTENSIONS
from .analyzer.scope import DEFAULT_SCOPE_FUNCTION_NAMES

# Version - single source of truth, read by pyproject.toml
__version__ = "1.2.0"

ENV_FILE_NAME = ".env"

# Supported locale file layouts
NAMING_PATTERNS = ("locale.json", "locale/common.json", "locale/index.json")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class LocaleFile:
    """A configured locale and where its file should live."""
    locale: str
    path: Path
    exists: bool


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Configuration loader with environment variable support.

    Values come from the process environment first, then from the project's
    .env file, then from built-in defaults.
    """

    def __init__(self, project_root: str | Path = "."):
        """Initialize config by reading the project's .env file.

        Args:
            project_root: Root directory of the project
        """
        self.project_root = Path(project_root).resolve()
        env_path = self.project_root / ENV_FILE_NAME
        self._file_values: Dict[str, Optional[str]] = (
            dotenv_values(env_path) if env_path.exists() else {}
        )

    def _get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = os.getenv(name)
        if value is None:
            value = self._file_values.get(name)
        return default if value is None or value == "" else value

    @property
    def locales_path(self) -> Path:
        """Locale directory, resolved against the project root."""
        return self.project_root / self._get("I18N_LOCALES_PATH", "src/i18n")

    @property
    def default_locale(self) -> str:
        return self._get("I18N_DEFAULT_LOCALE", "en")

    @property
    def supported_locales(self) -> List[str]:
        """Configured locales; defaults to just the default locale."""
        return _split_list(self._get("I18N_SUPPORTED_LOCALES")) or [self.default_locale]

    @property
    def function_names(self) -> List[str]:
        """Recognized translation function names, in priority order."""
        return _split_list(self._get("I18N_FUNCTION_NAMES")) or ["t", "translate"]

    @property
    def scope_function_names(self) -> List[str]:
        """Scope-establishing hooks (fixed naming convention)."""
        return list(DEFAULT_SCOPE_FUNCTION_NAMES)

    @property
    def file_naming_pattern(self) -> str:
        """Locale file layout; unknown values fall back to 'locale.json'."""
        pattern = self._get("I18N_FILE_NAMING", "locale.json")
        return pattern if pattern in NAMING_PATTERNS else "locale.json"

    @property
    def enabled(self) -> bool:
        """Whether analysis is enabled.

        Raises:
            ValueError: If I18N_ENABLED is not a recognizable boolean
        """
        raw = self._get("I18N_ENABLED", "true").strip().lower()
        if raw in _TRUE_VALUES:
            return True
        if raw in _FALSE_VALUES:
            return False
        raise ValueError(f"I18N_ENABLED must be true or false, got {raw!r}")

    @property
    def source_extensions(self) -> List[str]:
        return list(SOURCE_EXTENSIONS)

    def locale_file_path(self, locale: str) -> Path:
        """Path of the file holding a locale's translations."""
        pattern = self.file_naming_pattern
        if pattern == "locale/common.json":
            return self.locales_path / locale / "common.json"
        if pattern == "locale/index.json":
            return self.locales_path / locale / "index.json"
        return self.locales_path / f"{locale}.json"

    def available_locales(self) -> List[LocaleFile]:
        """Every supported locale with its file path and existence flag."""
        locales = []
        for locale in self.supported_locales:
            path = self.locale_file_path(locale)
            locales.append(LocaleFile(locale, path, path.is_file()))
        return locales


# One instance per project root
_configs: Dict[Path, Config] = {}


def get_config(project_root: str | Path = ".") -> Config:
    """Get or create the cached Config for a project root.

    Returns:
        Config instance
    """
    root = Path(project_root).resolve()
    if root not in _configs:
        _configs[root] = Config(root)
    return _configs[root]


def reset_config() -> None:
    """Drop cached configs (e.g. after the .env file changed)."""
    _configs.clear()


def render_env_template(file_naming_pattern: str = "locale.json") -> str:
    """Text of a .env file holding every configuration variable."""
    return (
        "# i18n-janitor configuration\n"
        "I18N_LOCALES_PATH=src/i18n\n"
        "I18N_DEFAULT_LOCALE=en\n"
        "I18N_SUPPORTED_LOCALES=en\n"
        "I18N_FUNCTION_NAMES=t,translate\n"
        "# One of: locale.json, locale/common.json, locale/index.json\n"
        f"I18N_FILE_NAMING={file_naming_pattern}\n"
        "I18N_ENABLED=true\n"
    )
