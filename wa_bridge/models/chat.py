"""Pydantic model for the chat listing."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatSummary(BaseModel):
    """One entry of the /chats listing."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    is_group: bool = Field(default=False, alias="isGroup")

    @staticmethod
    def raw_id(raw: dict[str, Any]) -> Optional[str]:
        """Serialized chat id of a raw chat object, or None when it has none."""
        chat_id = raw.get("id")
        if isinstance(chat_id, dict):
            chat_id = chat_id.get("_serialized")
        return chat_id or None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> ChatSummary:
        """Project a raw chat object from WhatsApp Web.

        ``name`` falls back to ``formattedTitle`` when the primary name is
        missing or empty. Raises ``ValidationError`` when the chat has no id.
        """
        return cls(
            id=cls.raw_id(raw),
            name=raw.get("name") or raw.get("formattedTitle"),
            is_group=bool(raw.get("isGroup", False)),
        )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)
