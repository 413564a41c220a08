import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Dict, Any


logger = logging.getLogger(__name__)


ARC_SEGMENTS = 20


@dataclass(frozen=True)
class ConverterConfig:
    """Settings shared by the decoder and the footprint writer.

    Margins taken from records are in source units (mil); the thru-hole
    mask margin is written verbatim in mm.
    """

    arc_segments: int = ARC_SEGMENTS
    default_mask_margin: float = 2.0
    default_paste_margin: float = 0.0
    thru_hole_mask_margin: float = 0.051
    version: str = "20211014"
    generator: str = "pcbnew"
    reference_offset: float = 5.0
    value_offset: float = 5.0


DEFAULT_CONFIG = ConverterConfig()


def _matches_default_type(key: str, value: Any) -> bool:
    """Check an override against the type of the field's default; ints pass for floats."""
    default = getattr(DEFAULT_CONFIG, key)
    if isinstance(value, bool):
        return False
    if isinstance(default, float):
        return isinstance(value, (int, float))
    return isinstance(value, type(default))


def load_config(config_path: Optional[str] = None) -> ConverterConfig:
    """Load a config from a JSON file of overrides.

    Unknown keys and values of the wrong type are ignored. An unreadable
    file yields the defaults.
    """
    if not config_path:
        return DEFAULT_CONFIG

    path = Path(config_path)
    if not path.exists():
        logger.warning(f"Config file not found: {path}")
        return DEFAULT_CONFIG

    try:
        with open(path, "r", encoding="utf-8") as f:
            overrides: Dict[str, Any] = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load config {path}: {e}")
        return DEFAULT_CONFIG

    if not isinstance(overrides, dict):
        logger.warning(f"Config {path} is not a JSON object, using defaults")
        return DEFAULT_CONFIG

    known = {f.name for f in fields(ConverterConfig)}
    accepted = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue
        if not _matches_default_type(key, value):
            logger.warning(f"Ignoring config key {key}: unexpected value {value!r}")
            continue
        if key == "arc_segments" and value < 1:
            logger.warning(f"Ignoring config key {key}: must be at least 1")
            continue
        accepted[key] = value

    logger.info(f"Loaded {len(accepted)} config overrides from {path}")
    return replace(DEFAULT_CONFIG, **accepted)
