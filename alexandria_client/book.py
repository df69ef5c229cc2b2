from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Book(BaseModel):
    """A single title in the Alexandria catalog."""

    model_config = ConfigDict(extra="ignore")

    isbn: str
    title: str
    author: str
    description: str | None = None
    cover_url: str | None = None
    # Copies owned by the library vs. copies currently on the shelf
    count: int = Field(default=0, ge=0)
    available: int = Field(default=0, ge=0)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def to_dict(self) -> dict:
        return self.model_dump()


class Action(str, Enum):
    CHECK_OUT = "CheckOut"
    CHECK_IN = "CheckIn"


class ActionRequest(BaseModel):
    """Body of a checkout/checkin call."""

    action: Action
    isbn: str
    student_id: str
