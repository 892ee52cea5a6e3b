"""Policy boilerplate (inclusions, payment terms, ...) with layered defaults."""

import json
import re
from functools import lru_cache
from importlib import resources
from typing import Any, Optional

from structlog import get_logger

logger = get_logger(__name__)

POLICY_KEYS = (
    "inclusions",
    "exclusions",
    "important_notes",
    "payment_terms",
    "useful_tips",
    "kitchen_group_policy",
    "cancellation_policy",
    "airline_cancellation_policy",
    "terms_and_conditions",
)

_LINE_SPLIT = re.compile(r"\n|•")
_TEXT_KEYS = ("text", "value", "label", "content")


@lru_cache(maxsize=1)
def load_default_policies() -> dict[str, list[str]]:
    """Load the packaged policy defaults (cached)."""
    raw = resources.files("tourpricing.data").joinpath("policy_defaults.json").read_text(encoding="utf-8")
    return json.loads(raw)


def _item_text(item: Any) -> str:
    if isinstance(item, dict):
        for key in _TEXT_KEYS:
            if item.get(key):
                return str(item[key]).strip()
        return ""
    return str(item).strip()


def parse_policy_field(value: Any) -> list[str]:
    """Normalize a stored policy value into a list of non-blank lines.

    Accepts a list (of strings or {"text": ...} objects), a JSON-encoded list,
    or free text with one entry per line / bullet.

    Args:
        value: Stored policy value

    Returns:
        List of policy lines (empty when nothing usable is stored)
    """
    if value is None:
        return []

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        try:
            decoded = json.loads(stripped)
        except json.JSONDecodeError:
            return [part.strip() for part in _LINE_SPLIT.split(stripped) if part.strip()]
        if isinstance(decoded, list):
            return parse_policy_field(decoded)
        return [stripped]

    if isinstance(value, (list, tuple)):
        lines = [_item_text(item) for item in value if item is not None]
        return [line for line in lines if line]

    if isinstance(value, dict):
        return [line for item in value.values() for line in parse_policy_field(item)]

    return [str(value)]


class PolicyResolver:
    """Resolves policy text: explicit value, then location value, then default."""

    def __init__(self, defaults: Optional[dict[str, list[str]]] = None):
        self.defaults = defaults if defaults is not None else load_default_policies()

    def resolve(
        self,
        key: str,
        explicit: Any = None,
        location: Any = None,
    ) -> list[str]:
        """Resolve one policy section.

        Args:
            key: Policy key (see POLICY_KEYS)
            explicit: Value set on the quote itself
            location: Value configured on the destination location

        Returns:
            The first non-empty layer, as a list of lines

        Raises:
            KeyError: If key is not a known policy section
        """
        if key not in POLICY_KEYS:
            raise KeyError(f"Unknown policy key: {key}")

        for source, value in (("explicit", explicit), ("location", location)):
            lines = parse_policy_field(value)
            if lines:
                logger.debug("Resolved policy", key=key, source=source, lines=len(lines))
                return lines

        return list(self.defaults.get(key, []))

    def resolve_all(
        self,
        explicit: Optional[dict[str, Any]] = None,
        location: Optional[dict[str, Any]] = None,
    ) -> dict[str, list[str]]:
        """Resolve every policy section at once."""
        explicit = explicit or {}
        location = location or {}
        return {
            key: self.resolve(key, explicit.get(key), location.get(key))
            for key in POLICY_KEYS
        }
