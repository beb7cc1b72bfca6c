"""
Guestbook Backend: Pydantic Schemas
===================================

What:  Pydantic models for the data that crosses the HTTP boundary.
Who:   EntryService validates submitted forms with GuestbookForm and hands
       EntryView objects to the templates; /health returns HealthResponse.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from guestbook.models.entry import NAME_MAX_LENGTH

TEXT_MAX_LENGTH = 2000


# ══════════════════════════════════════════════════════════════════════════
# Form Models: what the browser posts
# ══════════════════════════════════════════════════════════════════════════


class GuestbookForm(BaseModel):
    """
    The "new entry" form.

    Both fields are trimmed before validation; a field that is empty after
    trimming is rejected with a per-field message the view shows inline.
    """
    name: str = Field(max_length=NAME_MAX_LENGTH, description="Author name")
    text: str = Field(max_length=TEXT_MAX_LENGTH, description="Message body")

    @field_validator("name", "text", mode="before")
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Please enter your name")
        return v

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("Please enter a message")
        return v


# ══════════════════════════════════════════════════════════════════════════
# View Models: what the templates render
# ══════════════════════════════════════════════════════════════════════════


class EntryView(BaseModel):
    """Read-only projection of a GuestbookEntry for rendering."""
    id: int
    name: str
    text: str
    created_at: datetime

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Health check response for monitoring and container probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
