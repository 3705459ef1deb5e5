"""
demand/categories.py

Fixed crop category set and the rule chain that classifies raw group labels.

Rules are evaluated top to bottom and the first match wins. Add new rules
at the position where they should take precedence; nothing else in the
module depends on their order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Final

VALID_CATEGORIES: Final[tuple[str, ...]] = (
    "Vegetables",
    "Fruits",
    "Spices",
    "Cereals",
    "Pulses",
    "Oil Seeds",
    "Oils and Fats",
    "Fibre Crops",
    "Forest Products",
    "Flowers",
    "Dry Fruits",
    "Beverages",
    "Live Stock",
    "Drug and Narcotics",
    "Other",
)

_CATEGORY_BY_LOWER: Final[dict[str, str]] = {name.lower(): name for name in VALID_CATEGORIES}

_WHITESPACE = re.compile(r"\s+")


def normalize_label(value: str) -> str:
    """
    Lowercase, trim and collapse internal whitespace.
    """

    return _WHITESPACE.sub(" ", value.strip().lower())


def category_slug(name: str) -> str:
    """
    Build the category reference id: ``"Oil Seeds"`` -> ``"oil_seeds"``.
    """

    return _WHITESPACE.sub("_", name.strip().lower())


def _equals(*labels: str) -> Callable[[str], bool]:
    options = frozenset(labels)
    return lambda value: value in options


def _contains(*fragments: str) -> Callable[[str], bool]:
    return lambda value: any(fragment in value for fragment in fragments)


@dataclass(frozen=True)
class CategoryRule:
    """
    One fallback classification rule over a normalized label.
    """

    name: str
    predicate: Callable[[str], bool]
    category: str

    def matches(self, label: str) -> bool:
        return self.predicate(label)


DEFAULT_CATEGORY_RULES: Final[tuple[CategoryRule, ...]] = (
    CategoryRule("oil_seeds", _equals("oilseeds", "oil seeds"), "Oil Seeds"),
    CategoryRule(
        "oils_and_fats",
        _equals("oil and fats", "oils and fats", "oils & fats"),
        "Oils and Fats",
    ),
    CategoryRule("fibre_crops", _equals("fiber crops", "fibre crops"), "Fibre Crops"),
    # e.g. "Live Stock,Poultry,Fisheries"
    CategoryRule("live_stock", _contains("live stock", "livestock"), "Live Stock"),
    CategoryRule(
        "drug_and_narcotics",
        _equals("drug & narcotics", "drugs and narcotics"),
        "Drug and Narcotics",
    ),
    CategoryRule("dry_fruits", _equals("dry fruit"), "Dry Fruits"),
)


class CategoryClassifier:
    """
    Maps a raw group label onto one of :data:`VALID_CATEGORIES`.
    """

    def __init__(self, rules: tuple[CategoryRule, ...] | None = None) -> None:
        self._rules = DEFAULT_CATEGORY_RULES if rules is None else tuple(rules)
        for rule in self._rules:
            if rule.category not in VALID_CATEGORIES:
                raise ValueError(
                    f"Rule '{rule.name}' targets unknown category '{rule.category}'."
                )

    @property
    def rules(self) -> tuple[CategoryRule, ...]:
        return self._rules

    def classify(self, raw: str | None) -> str | None:
        """
        Return the canonical category name, or ``None`` when nothing matches.
        """

        if raw is None or not raw.strip():
            return None

        direct = _CATEGORY_BY_LOWER.get(raw.strip().lower())
        if direct is not None:
            return direct

        label = normalize_label(raw)
        direct = _CATEGORY_BY_LOWER.get(label)
        if direct is not None:
            return direct

        for rule in self._rules:
            if rule.matches(label):
                return rule.category
        return None
