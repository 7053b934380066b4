"""Pydantic models for session state."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class SessionState(BaseModel):
    """Current state of the WhatsApp Web session as seen by the service."""

    ready: bool = False
    authenticated: bool = False
    last_qr: Optional[str] = None  # PNG data URL of the pending login code
    last_auth_failure: Optional[str] = None
    last_disconnect: Optional[str] = None

    def health(self) -> dict:
        return {
            "ok": True,
            "ready": self.ready,
            "authenticated": self.authenticated,
            "auth_failure": self.last_auth_failure,
        }

    def status(self) -> dict:
        return {
            "ready": self.ready,
            "authenticated": self.authenticated,
            "auth_failure": self.last_auth_failure,
            "disconnected": self.last_disconnect,
            "qr_available": bool(self.last_qr),
        }
