import json
import yaml
from typing import Any, Callable
from pathlib import Path

from pydantic import ValidationError

from ringhttp.config.models.client import ClientConfig
from ringhttp.core.exceptions import ConfigurationError


class ConfigLoader:
    """
    Load and validate client configs from YAML/JSON. A source is either a
    file path or the raw document text.
    """

    def from_yaml(self, source: str | Path) -> ClientConfig:
        data = self._load(source, parser=yaml.safe_load)
        return self._build(data)

    def from_json(self, source: str | Path) -> ClientConfig:
        data = self._load(source, parser=json.loads)
        return self._build(data)

    def _load(
        self,
        source: str | Path,
        *,
        parser: Callable[[str], Any],
    ) -> Any:
        text = self._read_source(source)
        return parser(text)

    def _read_source(self, source: str | Path) -> str:
        """
        Read source as text.
        If `source` is a file path, read it.
        Otherwise treat it as raw content.
        """
        if isinstance(source, Path):
            return source.read_text()

        # string: path or raw content?
        if "\n" not in source:
            p = Path(source)
            if p.is_file():
                return p.read_text()

        return source

    def _build(self, data: Any) -> ClientConfig:
        try:
            return ClientConfig.model_validate(data or {})
        except ValidationError as exc:
            raise ConfigurationError(f"invalid client config: {exc}") from exc
