"""Preset persistence (single JSON file)."""

import copy
import json
import logging
from datetime import UTC, datetime
from pathlib import Path

from reelsmith.config import get_settings
from reelsmith.models.errors import ConfigurationError
from reelsmith.models.preset import ShortFormPreset, StandardPreset, parse_preset
from reelsmith.storage.defaults import DEFAULT_PRESETS

logger = logging.getLogger(__name__)

AnyPreset = StandardPreset | ShortFormPreset


class PresetStore:
    """Name-keyed preset mapping, rewritten as a whole on every mutation.

    Records are validated on ``put`` and parsed again on every ``get``, so
    callers always get a typed preset variant back. Loading the file only
    checks that it is a JSON object; a hand-edited record that no longer
    validates fails when it is read.
    """

    def __init__(self, path: Path | None = None):
        settings = get_settings()
        self.path = path or settings.resolve(settings.presets_file)
        self._records: dict[str, dict] = self._load()

    def _load(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load presets from {self.path}: {e}",
                details={"path": str(self.path)},
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Preset file {self.path} must contain a JSON object",
                details={"path": str(self.path)},
            )
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._records, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, name: str) -> AnyPreset | None:
        """Return the preset called ``name``, or None."""
        record = self._records.get(name)
        if record is None:
            return None
        return parse_preset(record, name=name)

    def get_record(self, name: str) -> dict | None:
        """Return the stored JSON record, timestamps included."""
        record = self._records.get(name)
        return copy.deepcopy(record) if record is not None else None

    def names(self) -> list[str]:
        return sorted(self._records)

    def list(self) -> dict[str, dict]:
        """All stored records keyed by preset name."""
        return copy.deepcopy(self._records)

    def put(self, name: str, config: dict) -> dict:
        """Validate and store ``config`` under ``name``; return the stored record."""
        preset = parse_preset(config, name=name)
        now = datetime.now(UTC).isoformat()
        previous = self._records.get(name) or {}
        record = preset.model_dump(mode="json", by_alias=True, exclude_none=True)
        record["createdAt"] = previous.get("createdAt", now)
        record["updatedAt"] = now
        self._records[name] = record
        self._save()
        logger.info("Saved preset '%s' (%s)", name, preset.kind)
        return copy.deepcopy(record)

    def delete(self, name: str) -> bool:
        """Remove ``name``; return False when it did not exist."""
        if name not in self._records:
            return False
        del self._records[name]
        self._save()
        logger.info("Deleted preset '%s'", name)
        return True

    def ensure_defaults(self) -> None:
        """Seed the built-in presets into an empty store."""
        if self._records:
            return
        for name, config in DEFAULT_PRESETS.items():
            self.put(name, config)
