from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from taskbot.core.models import SHARED


class DefaultPolicy(str, Enum):
    SHARED = "shared"
    REQUESTER = "requester"

    @classmethod
    def parse(cls, value: str | None) -> "DefaultPolicy":
        if str(value or "").strip().lower() == cls.REQUESTER.value:
            return cls.REQUESTER
        return cls.SHARED


# Returned by canonical() for first-person mentions; resolve() swaps in the requester.
SELF = "__self__"
# Requester name when the sender has neither a display name nor an id.
UNKNOWN_REQUESTER = "Unbekannt"

SHARED_WORDS = frozenset(
    {
        "beide",
        "beiden",
        "zusammen",
        "gemeinsam",
        "wir",
        "uns",
        "alle",
        "both",
        "together",
        "we",
        "us",
        "shared",
        SHARED.lower(),
    }
)
SELF_WORDS = frozenset(
    {
        "ich",
        "mir",
        "mich",
        "mein",
        "meine",
        "meins",
        "selbst",
        "i",
        "me",
        "my",
        "mine",
        "myself",
    }
)


class PersonResolver:
    """Maps "ich", "beide", "jeremy" ... to the value stored in the person column."""

    def __init__(self, roster: Iterable[str], policy: DefaultPolicy = DefaultPolicy.SHARED) -> None:
        self.roster = {name.strip().lower(): name.strip() for name in roster if name.strip()}
        self.policy = policy

    def canonical(self, mention: Optional[str]) -> Optional[str]:
        """Requester-agnostic lookup.

        Returns SHARED, SELF, a roster name, the mention verbatim, or None
        when nothing was mentioned.
        """
        raw = " ".join(str(mention or "").split())
        if not raw:
            return None
        key = raw.lower()
        if key in SHARED_WORDS:
            return SHARED
        if key in SELF_WORDS:
            return SELF
        if key in self.roster:
            return self.roster[key]
        return raw

    def requester_name(self, display_name: Optional[str], sender_id: Optional[int] = None) -> str:
        raw = " ".join(str(display_name or "").split())
        if not raw:
            return f"User {sender_id}" if sender_id else UNKNOWN_REQUESTER
        first = raw.split(" ", 1)[0].lower()
        return self.roster.get(raw.lower()) or self.roster.get(first) or raw

    def resolve(
        self,
        mention: Optional[str],
        requester: str,
        policy: Optional[DefaultPolicy] = None,
    ) -> str:
        policy = policy or self.policy
        value = self.canonical(mention)
        if value == SELF:
            return requester
        if value is None:
            return requester if policy == DefaultPolicy.REQUESTER else SHARED
        return value
