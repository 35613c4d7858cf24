# Deutsche Anzeigenamen für Kategorien.
# Regel: in der Logik werden die Aliase (Schlüssel) benutzt, im Chat nur die Werte.

from __future__ import annotations

from typing import Final


# =========================
# Kategorien
# =========================
CATEGORY_LABELS: Final[dict[str, str]] = {
    "both": "👫 Gemeinsam",
    "shopping": "🛒 Einkaufen",
    "household": "🏠 Haushalt",
    "personal": "🙋 Persönlich",
    "work": "💼 Arbeit",
    "general": "📌 Allgemein",
}

# Reihenfolge im Chat: gemeinsame Aufgaben zuerst
CATEGORY_ORDER: Final[list[str]] = ["both", "shopping", "household", "personal", "work", "general"]

CATEGORY_ALIASES: Final[dict[str, str]] = {
    "einkauf": "shopping",
    "einkaufen": "shopping",
    "haushalt": "household",
    "persönlich": "personal",
    "privat": "personal",
    "arbeit": "work",
    "allgemein": "general",
    "gemeinsam": "both",
}


def label(mapping: dict[str, str], key: str, default: str | None = None) -> str:
    """Deutsches Label zu einem Alias, sonst der Alias selbst."""
    if not key:
        return default or ""
    return mapping.get(key, default or key)


def category_de(category_alias: str) -> str:
    return label(CATEGORY_LABELS, category_alias)


def category_from_word(word: str | None) -> str | None:
    raw = str(word or "").strip().lower()
    if not raw:
        return None
    if raw in CATEGORY_LABELS:
        return raw
    return CATEGORY_ALIASES.get(raw, raw)
