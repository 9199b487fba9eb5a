"""Word lists and extension sets used by the product rules.

These live in configuration rather than in the rule code so they can be
swapped per deployment (``PRODUCT_RULES_FILE``) or per test. The JSON file
uses the keys ``inappropriateWords``, ``homeRestrictedWords``,
``technologyKeywords`` and ``imageExtensions``; any key left out keeps its
default.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog_api.config import settings

logger = logging.getLogger(__name__)

DEFAULT_INAPPROPRIATE_WORDS = ("inappropriate1", "bannedword", "restricted")
DEFAULT_HOME_RESTRICTED_WORDS = ("adult", "weapon", "danger")
DEFAULT_TECHNOLOGY_KEYWORDS = (
    "phone", "laptop", "computer", "tablet", "monitor", "keyboard", "mouse",
    "headphones", "speaker", "camera", "tv", "smart", "wireless", "bluetooth",
    "usb", "gaming", "processor", "cpu", "gpu", "ssd", "hdd", "ram", "memory",
    "router", "modem", "wifi", "network", "tech", "digital", "electronic",
)
DEFAULT_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")


class ProductRuleSet(BaseModel):
    """Configuration data consumed by the product rule engine."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    inappropriate_words: tuple[str, ...] = Field(
        default=DEFAULT_INAPPROPRIATE_WORDS, alias="inappropriateWords"
    )
    home_restricted_words: tuple[str, ...] = Field(
        default=DEFAULT_HOME_RESTRICTED_WORDS, alias="homeRestrictedWords"
    )
    technology_keywords: tuple[str, ...] = Field(
        default=DEFAULT_TECHNOLOGY_KEYWORDS, alias="technologyKeywords"
    )
    image_extensions: tuple[str, ...] = Field(
        default=DEFAULT_IMAGE_EXTENSIONS, alias="imageExtensions"
    )

    @field_validator(
        "inappropriate_words",
        "home_restricted_words",
        "technology_keywords",
        "image_extensions",
    )
    @classmethod
    def _lowercase(cls, values: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(v.strip().lower() for v in values if v.strip())

    @classmethod
    def from_file(cls, path: str | Path) -> ProductRuleSet:
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def get_rule_set() -> ProductRuleSet:
    """FastAPI dependency returning the process-wide rule set."""

    if not settings.PRODUCT_RULES_FILE:
        return ProductRuleSet()

    rule_set = ProductRuleSet.from_file(settings.PRODUCT_RULES_FILE)
    logger.info("Loaded product rule set from %s", settings.PRODUCT_RULES_FILE)
    return rule_set
