"""
Classify package: expose theme classification of activity records.
"""

from .themes import ThemeRule, classify_record, classify_title, load_theme_rules, OTHER_THEME

__all__ = ["ThemeRule", "classify_record", "classify_title", "load_theme_rules", "OTHER_THEME"]
