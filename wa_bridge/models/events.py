"""Typed lifecycle events emitted by the chat client."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel

from ..constants import UNKNOWN_REASON


class QrIssued(BaseModel):
    """A new login code is waiting to be scanned."""

    code: str


class Ready(BaseModel):
    """The chat session is usable."""


class Authenticated(BaseModel):
    """Login succeeded."""


class AuthFailed(BaseModel):
    reason: Optional[str] = None

    @property
    def reason_text(self) -> str:
        return self.reason or UNKNOWN_REASON


class Disconnected(BaseModel):
    reason: Optional[str] = None

    @property
    def reason_text(self) -> str:
        return self.reason or UNKNOWN_REASON


LifecycleEvent = Union[QrIssued, Ready, Authenticated, AuthFailed, Disconnected]
