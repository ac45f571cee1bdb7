"""
Language registry for mapping file names and extensions to languages.
"""

import logging
import posixpath
from pathlib import Path

import yaml

from repohealth.core.file_scanner import file_extension

logger = logging.getLogger(__name__)

# Default path to the languages configuration file
_DEFAULT_LANGUAGES_CONFIG = Path(__file__).parent / "languages.yaml"


class LanguageRegistry:
    """
    Registry mapping extensions and special file names to languages.

    Extensions take precedence; exact file names (e.g. 'makefile',
    'go.mod') are consulted only when the extension is not registered.

    Example:
        >>> registry = LanguageRegistry(load_defaults=False)
        >>> registry.register("Elixir", [".ex", ".exs"])
        >>> registry.detect_from_path("lib/app.ex")
        'Elixir'
    """

    def __init__(self, load_defaults: bool = True):
        """
        Initialize the language registry.

        Args:
            load_defaults: If True, load the packaged languages.yaml
        """
        self._extension_to_language: dict[str, str] = {}
        self._filename_to_language: dict[str, str] = {}

        if load_defaults:
            self._load_from_yaml(_DEFAULT_LANGUAGES_CONFIG)

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "LanguageRegistry":
        """
        Create a registry from a YAML file of 'Language: [entries]'.

        Raises:
            ValueError: If the file is not a mapping or not valid YAML
        """
        registry = cls(load_defaults=False)
        registry._load_from_yaml(Path(config_path))
        return registry

    def _load_from_yaml(self, config_path: Path) -> None:
        if not config_path.exists():
            logger.warning(f"Languages config not found: {config_path}, using empty registry")
            return

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse languages config: {e}")
            raise ValueError(f"Invalid YAML in languages config: {e}") from e

        if data is None:
            return
        if not isinstance(data, dict):
            raise ValueError(f"Invalid languages config format: expected dict, got {type(data)}")

        for language, entries in data.items():
            if not isinstance(entries, list):
                logger.warning(
                    f"Invalid entries for {language}: expected list, got {type(entries)}"
                )
                continue
            self.register(str(language), [str(e) for e in entries])

    def register(self, language: str, entries: list[str]) -> "LanguageRegistry":
        """
        Register extensions ('.ext') and exact file names for a language.

        Returns:
            Self for method chaining
        """
        for entry in entries:
            key = entry.lower()
            if key.startswith("."):
                self._extension_to_language[key] = language
            else:
                self._filename_to_language[key] = language
        return self

    def detect_from_path(self, relative_path: str) -> str:
        """
        Detect the language of a path.

        Returns:
            Language name, or '' if not recognized
        """
        name = posixpath.basename(relative_path).lower()
        language = self._extension_to_language.get(file_extension(name))
        if language:
            return language
        return self._filename_to_language.get(name, "")

    def get_all_languages(self) -> set[str]:
        return set(self._extension_to_language.values()) | set(
            self._filename_to_language.values()
        )
