from typing import Dict, Iterator, List, Optional, Tuple


class TranslationTable:
    """
    Ordered mapping of translation key to ``{language code: value}``.

    Keys keep their first-insertion order. Adding a value for a (key, language)
    pair that is already set keeps the newer value and records the key as a
    duplicate; duplicates keep the order in which they were first detected.
    """

    def __init__(self, entries: Optional[Dict[str, Dict[str, str]]] = None):
        self._entries: Dict[str, Dict[str, str]] = {}
        self._duplicates: Dict[str, None] = {}
        for key, lang_values in (entries or {}).items():
            for lang, value in lang_values.items():
                self.add(key, lang, value)

    def add(self, key: str, lang: str, value: str) -> None:
        lang_values = self._entries.setdefault(key, {})
        if lang in lang_values:
            self._duplicates.setdefault(key, None)
        lang_values[lang] = value

    def get(self, key: str) -> Dict[str, str]:
        return self._entries.get(key, {})

    def items(self) -> Iterator[Tuple[str, Dict[str, str]]]:
        return iter(self._entries.items())

    def keys(self) -> List[str]:
        return list(self._entries)

    @property
    def duplicates(self) -> List[str]:
        return list(self._duplicates)

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {key: dict(values) for key, values in self._entries.items()}

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)
