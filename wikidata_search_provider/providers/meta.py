from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .messages import Message
from .records import ResultRecord


@dataclass(frozen=True, slots=True)
class Icon:
    """Icon request handed to the host; loading the asset is the host's job."""

    path: str
    size: int


@dataclass(frozen=True, slots=True)
class ResultMeta:
    """
    Renderable shape of one result row.

    ``source`` is either a placeholder :class:`Message` or the stored
    :class:`ResultRecord`; ``create_icon`` dispatches on it.
    """

    id: str
    name: str
    description: str
    source: Message | ResultRecord
    provider_icon: str

    @classmethod
    def for_message(cls, message: Message, provider_icon: str) -> ResultMeta:
        return cls(
            id=message.id,
            name=message.name,
            description=message.description,
            source=message,
            provider_icon=provider_icon,
        )

    @classmethod
    def for_record(cls, record: ResultRecord, provider_icon: str) -> ResultMeta:
        return cls(
            id=record.id,
            name=record.label,
            description=record.description,
            source=record,
            provider_icon=provider_icon,
        )

    @property
    def is_placeholder(self) -> bool:
        return isinstance(self.source, Message)

    def create_icon(self, size: int) -> Icon | None:
        if isinstance(self.source, Message):
            return Icon(path=self.provider_icon, size=size)
        # wbsearchentities hits carry no image; let the host fall back to the provider icon
        return None


def resolve_icon_path(icon: str) -> str:
    path = Path(icon)
    if not path.is_absolute():
        path = Path(__file__).resolve().parent.parent / icon
    return str(path)
