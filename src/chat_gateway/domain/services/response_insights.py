"""Heuristic extraction of suggestions and follow-up actions from replies."""

from __future__ import annotations

import re

from chat_gateway.domain.enums import ActionType

MAX_SUGGESTIONS = 3
MIN_SUGGESTION_LENGTH = 10


_LEAD_INS = (
    r"I suggest|I recommend|You could|Try to|Consider|Maybe|Perhaps|You might want to"
)
_SUGGESTION_RE = re.compile(rf"(?:{_LEAD_INS})\s*([^.!?]+)", re.IGNORECASE)
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")
_ACTIONABLE_RE = re.compile(
    r"\b(start|create|open|set up|track|reduce|save|invest|review|set|build)\b",
    re.IGNORECASE,
)


def detect_action(text: str) -> ActionType | None:
    """First matching action wins; order mirrors how specific each cue is."""
    lower = text.lower()
    if "create a budget" in lower or "set up a budget" in lower:
        return ActionType.CREATE_BUDGET
    if "set a goal" in lower or "savings goal" in lower:
        return ActionType.SET_GOAL
    if "track" in lower and "expense" in lower:
        return ActionType.TRACK_EXPENSE
    if any(cue in lower for cue in ("learn more", "educational", "teach")):
        return ActionType.EDUCATE
    return None


def extract_suggestions(text: str) -> tuple[str, ...]:
    found = [
        m.group(1).strip()
        for m in _SUGGESTION_RE.finditer(text)
        if len(m.group(1).strip()) > MIN_SUGGESTION_LENGTH
    ]
    if found:
        return tuple(found[:MAX_SUGGESTIONS])

    # No explicit lead-ins: fall back to actionable opening sentences.
    sentences = _SENTENCE_RE.split(text)[:4]
    actionable = [s.strip() for s in sentences if _ACTIONABLE_RE.search(s)]
    return tuple(actionable[:MAX_SUGGESTIONS])
