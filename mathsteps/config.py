"""
MathSteps — settings loaded from a local JSON file.

Settings live in ``<project>/data/mathsteps.json`` unless the
``MATHSTEPS_CONFIG`` environment variable points somewhere else.  A missing
or unreadable file simply means "use the defaults".
"""

import json
import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data")
_CONFIG_FILE = os.environ.get(
    "MATHSTEPS_CONFIG", os.path.join(_DATA_DIR, "mathsteps.json")
)

# ── Default settings ────────────────────────────────────────────────────
DEFAULT_SETTINGS = {
    "precision": 3,                      # decimal places kept in numeric results
    "default_variable": "x",
    "real_solutions": True,              # equations are solved over the reals
    "integration_constant": "C",
    "case_insensitive_functions": True,  # accept Sin(x), COS(x), ...
    "max_image_bytes": 5 * 1024 * 1024,
    "display_limit": 100,                # chars of the problem echoed back
    "log_level": "INFO",
}

# Function names that get upper/title-case aliases when
# ``case_insensitive_functions`` is on.
_ALIASED_FUNCTIONS = ("sin", "cos", "tan", "sec", "csc", "cot")


def _load_file() -> dict:
    if os.path.exists(_CONFIG_FILE):
        try:
            with open(_CONFIG_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", _CONFIG_FILE, e)
            return {}
        if isinstance(data, dict):
            return data
        logger.warning("Ignoring settings file %s: top level is not an object", _CONFIG_FILE)
    return {}


def get_settings() -> dict:
    """Return the settings dict, merged over the defaults.

    Unknown keys in the file are ignored so a stale file can't inject
    settings the code doesn't understand.
    """
    merged = dict(DEFAULT_SETTINGS)
    for key, value in _load_file().items():
        if key in DEFAULT_SETTINGS:
            merged[key] = value
    return merged


def _function_aliases(enabled: bool) -> dict:
    if not enabled:
        return {}
    aliases = {}
    for name in _ALIASED_FUNCTIONS:
        aliases[name.capitalize()] = name
        aliases[name.upper()] = name
    return aliases


@dataclass(frozen=True)
class EngineConfig:
    """Read-only configuration injected into the engine and the pipeline."""

    precision: int = DEFAULT_SETTINGS["precision"]
    default_variable: str = DEFAULT_SETTINGS["default_variable"]
    real_solutions: bool = DEFAULT_SETTINGS["real_solutions"]
    integration_constant: str = DEFAULT_SETTINGS["integration_constant"]
    max_image_bytes: int = DEFAULT_SETTINGS["max_image_bytes"]
    display_limit: int = DEFAULT_SETTINGS["display_limit"]
    function_aliases: dict = field(
        default_factory=lambda: _function_aliases(True), compare=False, hash=False,
    )

    @classmethod
    def from_settings(cls, settings: dict) -> "EngineConfig":
        return cls(
            precision=int(settings["precision"]),
            default_variable=str(settings["default_variable"]),
            real_solutions=bool(settings["real_solutions"]),
            integration_constant=str(settings["integration_constant"]),
            max_image_bytes=int(settings["max_image_bytes"]),
            display_limit=int(settings["display_limit"]),
            function_aliases=_function_aliases(bool(settings["case_insensitive_functions"])),
        )


def load_config() -> EngineConfig:
    """Build an :class:`EngineConfig` from the settings file."""
    return EngineConfig.from_settings(get_settings())
