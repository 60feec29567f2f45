"""Display settings persistence.

Presentation-only preferences stored as a small JSON document. They never
influence the UV engine.
"""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class DisplaySettings:
    # Okabe-Ito palette instead of the red/green risk colours
    color_blind_mode: bool = False


class SettingsStore:
    """Loads and saves DisplaySettings at `path`."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> DisplaySettings:
        """Return stored settings, or defaults if the file is missing or unreadable."""
        if not self.path.exists():
            return DisplaySettings()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return DisplaySettings(color_blind_mode=bool(data.get("color_blind_mode", False)))
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Unreadable settings file, using defaults", path=str(self.path), error=str(exc))
            return DisplaySettings()

    def save(self, settings: DisplaySettings) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(asdict(settings)), encoding="utf-8")
        os.replace(tmp, self.path)
        logger.info("Settings saved", path=str(self.path), **asdict(settings))
