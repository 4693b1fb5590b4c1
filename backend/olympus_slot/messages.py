"""Localized strings and tutor lines with key-echo fallback."""
import json
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)

LOCALES_DIR = Path(__file__).parent / "locales"

# Used when the tutor line file cannot be read
DEFAULT_TUTOR_LINES: dict[str, str] = {
    "intro": "Hi! Let's see how this machine really works.",
}


class _KeepMissing(dict):
    """format_map helper that leaves unknown placeholders untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _interpolate(text: str, params: dict[str, Any]) -> str:
    if not params:
        return text
    try:
        return text.format_map(_KeepMissing(params))
    except (ValueError, IndexError) as e:
        logger.warning("Bad placeholder in %r: %s", text, e)
        return text


def _read_json(path: Path) -> dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a JSON object")
    return {str(k): str(v) for k, v in data.items()}


class MessageCatalog:
    """Two lookups: UI strings and tutor lines. Unknown keys echo back."""

    def __init__(
        self,
        strings: dict[str, str] | None = None,
        tutor_lines: dict[str, str] | None = None,
        locale: str = "en",
    ):
        self.strings = strings or {}
        self.tutor_lines = tutor_lines if tutor_lines else dict(DEFAULT_TUTOR_LINES)
        self.locale = locale

    @classmethod
    def load(cls, locale: str = "en", tutor_lines_path: str | Path | None = None) -> "MessageCatalog":
        """
        Load strings and tutor lines for a locale.

        Neither failure is fatal: missing strings fall back to echoing keys,
        missing tutor lines fall back to DEFAULT_TUTOR_LINES.
        """
        strings_path = LOCALES_DIR / f"{locale}.json"
        try:
            strings = _read_json(strings_path)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load strings for locale %s: %s", locale, e)
            strings = {}

        tutor_path = Path(tutor_lines_path) if tutor_lines_path else LOCALES_DIR / f"tutor_{locale}.json"
        try:
            tutor_lines = _read_json(tutor_path)
        except (OSError, ValueError) as e:
            logger.warning("Failed to load tutor lines from %s: %s", tutor_path, e)
            tutor_lines = dict(DEFAULT_TUTOR_LINES)

        return cls(strings=strings, tutor_lines=tutor_lines, locale=locale)

    def get(self, key: str, **params: Any) -> str:
        """UI string for key, or the key itself."""
        text = self.strings.get(key)
        if text is None:
            logger.debug("Missing string key %s", key)
            return key
        return _interpolate(text, params)

    def tutor(self, key: str, **params: Any) -> str:
        """Tutor line for key, or the key itself."""
        text = self.tutor_lines.get(key)
        if text is None:
            logger.debug("Missing tutor key %s", key)
            return key
        return _interpolate(text, params)
