"""Category classification using an ordered keyword taxonomy."""

import yaml
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from pathlib import Path
from rapidfuzz import fuzz

from .locales import DE_AT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryRule:
    """One taxonomy entry: a label and the keywords that select it."""
    label: str
    keywords: Tuple[str, ...]
    subcategories: Tuple[str, ...] = ()

    def match(self, *haystacks: str) -> Optional[str]:
        """Return the first keyword found in any haystack, else None."""
        for keyword in self.keywords:
            if any(keyword in haystack for haystack in haystacks):
                return keyword
        return None


@dataclass(frozen=True)
class CategoryMatch:
    """Outcome of classification, kept for explaining a suggestion."""
    label: str
    keyword: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.keyword is None


class CategoryClassifier:
    """Suggest an expense category: the first taxonomy entry with a keyword hit wins."""

    def __init__(self, rules_path: Optional[Path] = None):
        """
        Initialize classifier with category rules.

        Args:
            rules_path: Path to a categories.yml file, defaults to the bundled rules
        """
        self.rules_path = Path(rules_path) if rules_path else DE_AT.rules_path
        self.rules: List[CategoryRule] = []
        self.fallback: str = ""
        self.load_rules()

    def load_rules(self):
        """Load category rules from YAML file."""
        try:
            with open(self.rules_path, 'r', encoding='utf-8') as f:
                categories = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load category rules from {self.rules_path}: {e}")
            raise

        if not isinstance(categories, dict) or not categories:
            raise ValueError(f"No categories defined in {self.rules_path}")

        rules = []
        fallbacks = []
        for label, settings in categories.items():
            settings = settings or {}
            rules.append(CategoryRule(
                label=str(label),
                keywords=tuple(str(k).lower() for k in settings.get('any', [])),
                subcategories=tuple(str(s) for s in settings.get('subcategories', [])),
            ))
            if settings.get('fallback'):
                fallbacks.append(str(label))

        if len(fallbacks) != 1:
            raise ValueError(
                f"Expected exactly one fallback category in {self.rules_path}, found {len(fallbacks)}"
            )

        self.rules = rules
        self.fallback = fallbacks[0]
        logger.info(f"Loaded {len(self.rules)} category rules (fallback: '{self.fallback}')")

    def explain(self, vendor_name: Optional[str], text: Optional[str]) -> CategoryMatch:
        """
        Classify and report which keyword decided it.

        Args:
            vendor_name: Extracted vendor name, may be empty
            text: Full invoice text

        Returns:
            CategoryMatch with the label and the matching keyword (None for fallback)
        """
        vendor_lower = (vendor_name or '').lower()
        text_lower = (text or '').lower()

        for rule in self.rules:
            keyword = rule.match(vendor_lower, text_lower)
            if keyword:
                logger.debug(f"Category '{rule.label}' matched keyword '{keyword}'")
                return CategoryMatch(label=rule.label, keyword=keyword)

        logger.debug(f"No category keyword matched, using '{self.fallback}'")
        return CategoryMatch(label=self.fallback)

    def suggest_category(self, vendor_name: Optional[str], text: Optional[str]) -> str:
        """Return the category label for a vendor name and invoice text. Never None."""
        return self.explain(vendor_name, text).label

    def subcategories(self, label: str) -> List[str]:
        """Informational subcategories of a category, empty for unknown labels."""
        for rule in self.rules:
            if rule.label == label:
                return list(rule.subcategories)
        return []

    @property
    def labels(self) -> List[str]:
        return [rule.label for rule in self.rules]

    def get_category_suggestions(self, text: str, top_n: int = 3) -> List[Tuple[str, float]]:
        """
        Get top N category suggestions for review purposes.

        Unlike suggest_category this scores every category and tolerates
        OCR-damaged words through fuzzy matching.

        Args:
            text: Full text to analyze
            top_n: Number of suggestions to return

        Returns:
            List of (category, score) tuples sorted by score
        """
        category_scores: Dict[str, float] = {}
        text_lower = (text or '').lower()
        words = text_lower.split()

        for rule in self.rules:
            score = self._calculate_category_score(text_lower, words, rule.keywords)
            if score > 0:
                category_scores[rule.label] = score

        sorted_categories = sorted(category_scores.items(), key=lambda x: x[1], reverse=True)
        return sorted_categories[:top_n]

    def _calculate_category_score(self, text: str, words: List[str], keywords: Tuple[str, ...]) -> float:
        """Calculate score for a category based on keyword matches."""
        score = 0.0

        for keyword in keywords:
            # Exact match gets highest score
            if keyword in text:
                score += 5.0
                continue

            # Fuzzy match for OCR-garbled words
            for word in words:
                similarity = fuzz.ratio(keyword, word)
                if similarity >= 80:
                    score += similarity / 100.0 * 3.0

        return score
