"""Allowlist filter applied to build events before they reach GitHub."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ghdeploy.config import settings
from ghdeploy.events import BuildEvent


def _parse_csv(value: str) -> Optional[frozenset[str]]:
    """``"*"`` or blank means "allow everything" and yields ``None``."""
    if not value or value.strip() == "*":
        return None
    return frozenset(v.strip() for v in value.split(",") if v.strip())


@dataclass(frozen=True)
class EventFilter:
    statuses: Optional[frozenset[str]] = None
    trigger_ids: Optional[frozenset[str]] = None

    @classmethod
    def from_csv(cls, statuses: str = "*", trigger_ids: str = "*") -> "EventFilter":
        parsed = _parse_csv(statuses)
        return cls(
            statuses=frozenset(s.upper() for s in parsed) if parsed is not None else None,
            trigger_ids=_parse_csv(trigger_ids),
        )

    @classmethod
    def from_settings(cls) -> "EventFilter":
        return cls.from_csv(settings.filter_statuses, settings.filter_trigger_ids)

    def apply(self, event: BuildEvent) -> bool:
        if self.statuses is not None and event.status.value not in self.statuses:
            return False
        if self.trigger_ids is not None and event.trigger_id not in self.trigger_ids:
            return False
        return True

    __call__ = apply
