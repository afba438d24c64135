from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

from grating_sweep.domain.models import SweepConfiguration
from grating_sweep.orchestration.session import config_from_input_items

logger = logging.getLogger(__name__)

# 1.x presets are flat and keyed like the ``# Input`` header (min, gratingType, ...).
# 2.x presets are a dump of SweepConfiguration.
SCHEMA_VERSION = "2.0.0"
LEGACY_SCHEMA = "1.0.0"


def _slugify(name: str) -> str:
    safe = "".join(c if c.isalnum() or c in ("-", "_") else "-" for c in name.strip())
    safe = "-".join(filter(None, safe.split("-")))
    return safe.lower() or "preset"


def _major(version: Any) -> int:
    try:
        return int(str(version).split(".")[0])
    except ValueError:
        raise ValueError(f"unreadable schema_version {version!r}") from None


class LocalPresetStore:
    """Named sweep configurations kept as ``<base_dir>/<slug>.json``.

    Loading validates the sweep as a whole, so a preset that names a mode
    without that mode's parameters is refused before any output is opened.
    Presets without a ``schema_version``, or with a 1.x one, are read in the
    flat header layout and upgraded on the next `save`.
    """

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self.base_dir = Path(base_dir or Path.cwd() / "presets").resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def list(self) -> List[str]:
        return sorted(p.stem for p in self.base_dir.glob("*.json"))

    def path_for(self, name: str) -> Path:
        return self.base_dir / f"{_slugify(name)}.json"

    def save(self, name: str, cfg: SweepConfiguration) -> Path:
        path = self.path_for(name)
        data = cfg.model_dump()
        data["schema_version"] = SCHEMA_VERSION
        with path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return path

    def load(self, name: str) -> SweepConfiguration:
        path = self.path_for(name)
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"preset {name!r} ({path}) does not hold a JSON object")
        version = data.pop("schema_version", LEGACY_SCHEMA)
        major = _major(version)
        if major > _major(SCHEMA_VERSION):
            raise ValueError(
                f"preset {name!r} has schema_version {version}, newer than {SCHEMA_VERSION}"
            )
        try:
            if major < 2:
                logger.info("migrating preset %s from schema %s", path, version)
                return config_from_input_items(data)
            return SweepConfiguration.model_validate(data)
        except KeyError as e:
            raise ValueError(f"preset {name!r} ({path}) is missing {e}") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"preset {name!r} ({path}) is not a valid sweep: {e}") from e

    def remove(self, name: str) -> None:
        path = self.path_for(name)
        if path.exists():
            path.unlink()
