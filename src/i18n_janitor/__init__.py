"""i18n-janitor - find where translation keys live and which ones are dead."""
from .config import __version__

__all__ = ["__version__"]
