# Prompts for the task assistant.
# {today} is YYYY-MM-DD, {weekday} the German weekday, {requester} the sender's name.
from __future__ import annotations

from typing import Iterable

from taskbot.core.models import SHARED, Task

SYSTEM_PROMPT = """Du bist der Aufgaben-Assistent eines Paares ({people}). Ihr teilt eine Aufgabenliste in Google Sheets.
Heute ist {weekday}, {today}. Die Nachricht kommt von {requester}.

Regeln:
- Nutze die bereitgestellten Funktionen für alles, was die Liste betrifft: anzeigen, hinzufügen, erledigen, ändern, löschen, rückgängig, Vorschläge.
- Mehrere Aufgaben in einer Nachricht ("Milch und Brot kaufen") werden einzelne Einträge in add_tasks.
- "ich", "mir", "meine" meint {requester}. "beide", "wir", "zusammen" meint beide ({shared}).
- {default_rule}
- Ort nur setzen, wenn ein Ort oder Geschäft genannt wird. Datum wörtlich übernehmen ("morgen", "Freitag") oder als YYYY-MM-DD.
- Zum Erledigen/Löschen/Ändern reicht ein eindeutiger Teil des Aufgabennamens aus der aktuellen Liste.
- Erfinde keine Aufgaben, die nicht in der Liste stehen.
- Wenn die Nachricht keine Aufgabenaktion ist, antworte kurz und freundlich auf Deutsch, ohne Funktion.
"""

DEFAULT_RULE_SHARED = "Wenn niemand genannt wird, person weglassen: die Aufgabe gehört dann euch beiden."
DEFAULT_RULE_REQUESTER = "Wenn niemand genannt wird, person weglassen: die Aufgabe gehört dann {requester}."

PLAN_HINT_PREFIX = "Hinweis aus der Vorplanung (unverbindlich):"

PLANNER_PROMPT = """Analysiere die Nachricht an einen Aufgaben-Assistenten.
Antworte NUR mit JSON ohne Markdown:
{"intent": "show|add|complete|delete|update|undo|suggest|chat", "targets": ["..."], "notes": "..."}
"""

EVALUATOR_PROMPT = """Du prüfst die Antwort eines Aufgaben-Assistenten an den Nutzer.
Die Aktionen sind bereits ausgeführt und dürfen nicht verändert werden.
Verbessere nur die Formulierung: kurz, freundlich, Deutsch, alle Fakten und Listen unverändert lassen.
Gib NUR den fertigen Antworttext zurück.
"""

_WEEKDAYS_DE = ("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag")


def weekday_de(index: int) -> str:
    return _WEEKDAYS_DE[index % 7]


def task_line(task: Task) -> str:
    who = "beide" if task.person == SHARED else task.person
    line = f"- [{who}] {task.text}"
    if task.location:
        line += f" @{task.location}"
    if task.when:
        line += f" (wann: {task.when})"
    return line


def build_context(tasks: Iterable[Task], mode: str = "full") -> str:
    """Current list for the model: only counts in "minimal" mode, every line in "full"."""
    active = [task for task in tasks if task.is_active]
    if not active:
        return "Die Liste ist leer."
    shared = sum(1 for task in active if task.is_shared)
    summary = f"Aktuell {len(active)} offene Aufgaben ({shared} gemeinsam)."
    if mode == "minimal":
        return summary
    return summary + "\n" + "\n".join(task_line(task) for task in active)
