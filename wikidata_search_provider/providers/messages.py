from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MessageKind(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    MISSING = "missing"


# Reserved identifiers. Wikidata ids look like Q42/P31/L1, so these never collide.
LOADING_ID = "__loading__"
ERROR_ID = "__error__"

SENTINEL_IDS: frozenset[str] = frozenset({LOADING_ID, ERROR_ID})


@dataclass(frozen=True, slots=True)
class Message:
    """A pseudo-result shown in place of real results (loading, error)."""

    kind: MessageKind
    id: str
    name: str
    description: str


def build_messages(name: str = "Wikidata") -> dict[str, Message]:
    return {
        LOADING_ID: Message(
            kind=MessageKind.LOADING,
            id=LOADING_ID,
            name=name,
            description="Loading items from Wikidata, please wait...",
        ),
        ERROR_ID: Message(
            kind=MessageKind.ERROR,
            id=ERROR_ID,
            name=name,
            description="Oops, an error occurred while searching.",
        ),
    }


def missing_message(identifier: str, name: str = "Wikidata") -> Message:
    """Fallback row for an identifier the store no longer (or never) knew."""
    return Message(
        kind=MessageKind.MISSING,
        id=identifier,
        name=name,
        description="This result is no longer available, please search again.",
    )


def is_sentinel(identifier: str) -> bool:
    return identifier in SENTINEL_IDS
