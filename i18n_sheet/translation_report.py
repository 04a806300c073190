"""
Translation report generation.

Analyzes a translation table for missing values, duplicate keys and
placeholders that are not used consistently across languages.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Set

from i18n_sheet.placeholders import extract_placeholders
from i18n_sheet.translation_table import TranslationTable


@dataclass
class MissingEntry:
    key: str
    lang: str


@dataclass
class PlaceholderInconsistency:
    key: str
    placeholders: Dict[str, Set[str]]


@dataclass
class TranslationReport:
    missing: List[MissingEntry] = field(default_factory=list)
    duplicates: List[str] = field(default_factory=list)
    placeholder_inconsistencies: List[PlaceholderInconsistency] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.missing or self.duplicates or self.placeholder_inconsistencies)

    def to_dict(self) -> Dict:
        """Plain, JSON-serializable form of the report (placeholder sets sorted)."""
        return {
            "missing": [{"key": m.key, "lang": m.lang} for m in self.missing],
            "duplicates": list(self.duplicates),
            "placeholderInconsistencies": [
                {
                    "key": item.key,
                    "placeholders": {lang: sorted(names) for lang, names in item.placeholders.items()},
                }
                for item in self.placeholder_inconsistencies
            ],
        }


def _missing_languages(languages: List[str], lang_values: Dict[str, str]) -> List[str]:
    # An empty translation counts as missing.
    return [lang for lang in languages if lang not in lang_values or lang_values[lang] == '']


def _placeholder_map(languages: List[str], lang_values: Dict[str, str]) -> Dict[str, Set[str]]:
    return {lang: extract_placeholders(lang_values.get(lang) or '') for lang in languages}


def _is_inconsistent(placeholder_map: Dict[str, Set[str]]) -> bool:
    all_placeholders: Set[str] = set()
    for names in placeholder_map.values():
        all_placeholders |= names
    return any(not names >= all_placeholders for names in placeholder_map.values())


def generate_translation_report(table: TranslationTable, languages: List[str]) -> TranslationReport:
    """
    Generate a report on missing translations, duplicates and placeholder issues.

    Args:
        table (TranslationTable): The aggregated translations.
        languages (List[str]): Language codes to check, in report order.

    Returns:
        TranslationReport: The findings.
    """
    report = TranslationReport(duplicates=table.duplicates)

    for key, lang_values in table.items():
        for lang in _missing_languages(languages, lang_values):
            report.missing.append(MissingEntry(key=key, lang=lang))

        placeholder_map = _placeholder_map(languages, lang_values)
        if _is_inconsistent(placeholder_map):
            report.placeholder_inconsistencies.append(
                PlaceholderInconsistency(key=key, placeholders=placeholder_map)
            )

    return report
