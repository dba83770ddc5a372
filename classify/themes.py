"""
Theme classifier: assign a record to the first rule whose keywords occur in its title.
Simple, dependency-free heuristics:
- case-insensitive substring match against the title
- rules are evaluated in order, first match wins
- fallback: "Other"
"""
import logging
import os
from typing import Dict, Iterable, List, Optional

import yaml

from normalize.models import ActivityRecord

logger = logging.getLogger(__name__)

OTHER_THEME = 'Other'

CONFIG_FILENAME = 'insights.yaml'


class ThemeRule:
    """
    Named theme with an ordered sequence of keywords.
    """
    def __init__(self, theme_name: str, keywords: Iterable[str]):
        self.theme_name = theme_name
        self.keywords = tuple(keywords)
        # lowercased once; matching is case-insensitive
        self._needles = tuple(k.lower() for k in self.keywords if k)

    def matches(self, title: str) -> bool:
        text = (title or '').lower()
        return any(n in text for n in self._needles)

    def __repr__(self):
        return f"ThemeRule({self.theme_name!r}, {list(self.keywords)!r})"


def rules_from_mapping(mapping: Dict[str, Iterable[str]]) -> List[ThemeRule]:
    """Build an ordered rule list from a theme name -> keywords mapping (insertion order kept)."""
    rules = []
    for name, keywords in (mapping or {}).items():
        if isinstance(keywords, str):
            keywords = [keywords]
        rules.append(ThemeRule(str(name), [str(k) for k in (keywords or [])]))
    return rules


DEFAULT_THEMES = {
    'Nuxt 4 / Framework': ['nuxt4', 'nuxt 4', 'nuxt3', 'layer', 'config refactor'],
    'Performance (INP/CLS)': ['inp', 'cls', 'performance', 'ttfb', 'lcp'],
    'Registration / Auth': ['registration', 'login', 'auth', 'customer', 'my-account', 'email change'],
    'Reviews System': ['review', 'rating'],
    'Checkout / Delivery': ['checkout', 'delivery', 'cart', 'packeta', 'shipping', 'payment'],
    'Catalog / PDP': ['catalog', 'pdp', 'product', 'filter', 'category', 'search'],
    'CMS / Content': ['cms', 'banner', 'pb-', 'content', 'pagebuilder'],
    'Infrastructure': ['hotfix', 'deploy', 'ci', 'pipeline', 'docker'],
}

DEFAULT_THEME_RULES = rules_from_mapping(DEFAULT_THEMES)


def classify_title(title: str, rules: List[ThemeRule]) -> str:
    for rule in rules or []:
        if rule.matches(title):
            return rule.theme_name
    return OTHER_THEME


def classify_record(record: ActivityRecord, rules: List[ThemeRule]) -> str:
    """Return the theme name for a record. Never fails; unmatched titles land in "Other"."""
    return classify_title(record.title, rules)


def default_config_path() -> str:
    """INSIGHTS_CONFIG env var, otherwise the bundled config/insights.yaml."""
    env_path = os.getenv('INSIGHTS_CONFIG')
    if env_path:
        return env_path
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), 'config', CONFIG_FILENAME)


def load_theme_rules(path: Optional[str] = None) -> List[ThemeRule]:
    """
    Load theme rules from the 'themes' section of the YAML config.
    Falls back to DEFAULT_THEME_RULES when the file is missing, unreadable or has no themes.
    """
    path = path or default_config_path()
    if not os.path.exists(path):
        return list(DEFAULT_THEME_RULES)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            doc = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read theme rules from %s (%s); using defaults", path, exc)
        return list(DEFAULT_THEME_RULES)
    themes = doc.get('themes') if isinstance(doc, dict) else None
    if not isinstance(themes, dict) or not themes:
        logger.warning("No 'themes' mapping in %s; using defaults", path)
        return list(DEFAULT_THEME_RULES)
    return rules_from_mapping(themes)
