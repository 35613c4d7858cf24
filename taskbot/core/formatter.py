from __future__ import annotations

from typing import Optional

from taskbot.core.aliases import CATEGORY_ORDER, category_de
from taskbot.core.models import SHARED, AddResult, Category, ListResult, Task

ALL_DONE_TEXT = "Keine Aufgaben! 🎉 Alles erledigt."
NOTHING_TO_UNDO_TEXT = "Es gibt nichts rückgängig zu machen."
UNDO_EXPIRED_TEXT = "⏱ Rückgängig geht nur innerhalb von 5 Minuten, das ist zu lange her."
NOT_REVERSIBLE_TEXT = {
    "complete": "Erledigte Aufgaben kann ich nicht wieder öffnen. Leg sie einfach neu an.",
    "delete": "Gelöschte Aufgaben kann ich nicht wiederherstellen. Leg sie einfach neu an.",
}


def _task_line(task: Task, show_person: bool) -> str:
    line = f"• {task.text}"
    if task.location:
        line += f" 📍{task.location}"
    if task.when:
        line += f" 📅{task.when}"
    if show_person and not task.is_shared:
        line += f" 👤{task.person}"
    return line


def _group_key(task: Task) -> str:
    if task.is_shared:
        return Category.BOTH.value
    if task.category == Category.BOTH:
        return Category.GENERAL.value
    return task.category.value


def _filter_description(result: ListResult, which: Optional[str] = None) -> str:
    person = result.filters.person
    location = result.filters.location
    parts = []
    if person and person != SHARED and which in (None, "person", "person+location"):
        parts.append(f"Person „{person}“")
    if location and which in (None, "location", "person+location"):
        parts.append(f"Ort „{location}“")
    return " und ".join(parts)


def _shared_only(result: ListResult, which: Optional[str] = None) -> bool:
    return result.filters.person == SHARED and which in (None, "person", "person+location")


def format_list(result: ListResult) -> str:
    if not result.tasks:
        if result.total_active == 0 or not result.filters.applied:
            return ALL_DONE_TEXT
        which = result.empty_filter
        noun = "gemeinsamen Aufgaben" if _shared_only(result, which) else "Aufgaben"
        scope = _filter_description(result, which)
        return f"Keine {noun} für {scope}." if scope else f"Keine {noun}."

    noun = "gemeinsame Aufgaben" if _shared_only(result) else "Aufgaben"
    scope = _filter_description(result)
    if scope:
        header = f"📋 {len(result.tasks)} {noun} für {scope}:"
    else:
        header = f"📋 {len(result.tasks)} {noun}:"

    show_person = not result.filters.person
    groups: dict[str, list[Task]] = {}
    for task in result.tasks:
        groups.setdefault(_group_key(task), []).append(task)

    blocks = [header]
    for key in CATEGORY_ORDER:
        tasks = groups.get(key)
        if not tasks:
            continue
        lines = [category_de(key)]
        lines.extend(_task_line(task, show_person) for task in tasks)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_add(result: AddResult) -> str:
    if not result.added:
        if result.duplicates:
            names = ", ".join(f"„{text}“" for text in result.duplicates)
            return f"Steht schon auf der Liste: {names}"
        return "Ich habe keine Aufgabe erkannt. Was soll ich hinzufügen?"

    shared = result.shared_count
    personal = result.personal_count
    if len(result.added) == 1:
        task = result.added[0]
        who = "für euch beide" if task.is_shared else f"für {task.person}"
        text = f"✅ „{task.text}“ hinzugefügt ({who})"
    else:
        parts = []
        if shared:
            parts.append(f"{shared} gemeinsam")
        if personal:
            parts.append(f"{personal} persönlich")
        text = f"✅ {len(result.added)} Aufgaben hinzugefügt ({', '.join(parts)})"
    if result.duplicates:
        text += f"\nÜbersprungen (schon vorhanden): {', '.join(result.duplicates)}"
    return text


def format_complete(matched: Optional[str], name: str) -> str:
    if matched is None:
        return f"Nicht gefunden: „{name}“"
    return f"✅ „{matched}“ erledigt!"


def format_complete_all(count: int) -> str:
    if count == 0:
        return ALL_DONE_TEXT
    return f"✅ Alle {count} Aufgaben erledigt!"


def format_delete(matched: Optional[str], name: str) -> str:
    if matched is None:
        return f"Nicht gefunden: „{name}“"
    return f"🗑 „{matched}“ gelöscht."


def format_delete_all(count: int) -> str:
    if count == 0:
        return "Die Liste ist schon leer."
    return f"🗑 {count} Aufgaben gelöscht."


def format_update(ok: bool, name: str) -> str:
    if not ok:
        return f"Nicht gefunden: „{name}“"
    return f"✏️ „{name}“ aktualisiert."


def format_undo(status: str, action: Optional[str] = None, count: int = 0) -> str:
    if status == "expired":
        return UNDO_EXPIRED_TEXT
    if status == "empty":
        return NOTHING_TO_UNDO_TEXT
    if status == "not_reversible":
        return NOT_REVERSIBLE_TEXT.get(action or "", NOTHING_TO_UNDO_TEXT)
    if count == 0:
        return "Die hinzugefügten Aufgaben sind schon weg."
    return f"↩️ {count} Aufgabe(n) wieder entfernt."


def format_suggestions(suggestions: list[str], reason: str = "") -> str:
    items = [s.strip() for s in suggestions if s and s.strip()]
    if not items:
        return reason or "Mir fällt gerade nichts ein."
    lines = ["💡 Vorschläge:"]
    lines.extend(f"• {item}" for item in items)
    if reason:
        lines.append("")
        lines.append(reason)
    lines.append("")
    lines.append("Sag einfach „füge … hinzu“, wenn du etwas davon übernehmen willst.")
    return "\n".join(lines)
