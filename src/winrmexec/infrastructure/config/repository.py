"""
Configuration repository for loading client settings.

Handles file I/O and validation of ``winrm_config.json`` (or ``.jsonc``).
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from winrmexec.domain.config import ClientSettings

logger = logging.getLogger(__name__)

CONFIG_NAME = "winrm_config"
SECTIONS = ("transport", "execution")

_LINE_COMMENT = re.compile(r'^\s*//.*$', re.MULTILINE)

Overrides = Dict[str, Dict[str, Any]]


def _strip_comments(jsonc_content: str) -> str:
    """Strip whole-line ``//`` comments from JSONC content."""
    return _LINE_COMMENT.sub("", jsonc_content)


class ConfigRepository:
    """
    Repository for configuration file operations.

    Looks for ``<name>.json`` first, then ``<name>.jsonc``, unless an exact
    path is given.
    """

    def __init__(self, config_dir: Path):
        """
        Initialize the config repository.

        Args:
            config_dir: Base directory for configuration files
        """
        self.config_dir = Path(config_dir)

    def load_json_file(self, filename: str) -> Dict[str, Any]:
        """
        Load a JSON or JSONC file.

        Args:
            filename: Name of the file to load (without extension)

        Returns:
            Parsed JSON data as dictionary

        Raises:
            FileNotFoundError: If neither variant exists
            ValueError: If the file cannot be parsed
        """
        json_path = self.config_dir / f"{filename}.json"
        jsonc_path = self.config_dir / f"{filename}.jsonc"

        if json_path.exists():
            return self.load_path(json_path)
        if jsonc_path.exists():
            return self.load_path(jsonc_path)

        raise FileNotFoundError(
            f"Config file '{filename}.json' or '{filename}.jsonc' not found in {self.config_dir}"
        )

    def load_path(self, path: Path) -> Dict[str, Any]:
        """
        Load exactly ``path``, relative to the config directory.

        ``//`` comment lines are stripped when the suffix is ``.jsonc``;
        any other suffix is read as plain JSON.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file cannot be parsed
        """
        path = self.config_dir / path
        if not path.is_file():
            raise FileNotFoundError(f"Config file {path} not found")

        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".jsonc":
            content = _strip_comments(content)

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("Failed to parse config file %s: %s", path, e)
            raise ValueError(f"Invalid JSON in {path}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {path}")
        return data

    def load_settings(
        self,
        filename: str = CONFIG_NAME,
        overrides: Optional[Overrides] = None,
    ) -> ClientSettings:
        """
        Load and validate client settings from ``<filename>.json(c)``.

        Raises:
            FileNotFoundError: If the config file is missing
            ValueError: If the config cannot be parsed or validated
        """
        return self.build_settings(self.load_json_file(filename), overrides, source=filename)

    def load_settings_path(
        self,
        path: Path,
        overrides: Optional[Overrides] = None,
    ) -> ClientSettings:
        """Load and validate client settings from exactly ``path``."""
        return self.build_settings(self.load_path(path), overrides, source=str(path))

    @staticmethod
    def build_settings(
        data: Dict[str, Any],
        overrides: Optional[Overrides] = None,
        source: str = "command line",
    ) -> ClientSettings:
        """
        Merge ``overrides`` over file ``data`` and validate the result.

        Override values of None are skipped so unset CLI flags keep the
        file's value.

        Raises:
            ValueError: If a section is not an object or validation fails
        """
        merged = dict(data)
        for section in SECTIONS:
            values = merged.get(section) or {}
            if not isinstance(values, dict):
                raise ValueError(f"Expected an object for '{section}' in {source}")
            merged[section] = dict(values)

        for section, values in (overrides or {}).items():
            merged.setdefault(section, {}).update(
                {key: value for key, value in values.items() if value is not None}
            )

        try:
            return ClientSettings(**merged)
        except ValidationError as e:
            logger.error("Failed to validate %s: %s", source, e)
            raise ValueError(f"Invalid WinRM configuration: {e}") from e
