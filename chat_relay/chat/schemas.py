from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["user", "assistant"]


class Turn(BaseModel):
    """One role-tagged message. Position in the conversation is its identity."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: Role = Field(description="Author of the turn.", examples=["user"])
    content: str = Field(description="Text payload of the turn.", examples=["Hello"])

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatRequest(BaseModel):
    """Full conversation snapshot relayed to the completion provider."""

    messages: list[Turn] | None = Field(
        default=None,
        description="Conversation so far, oldest first. Must contain at least one turn.",
    )


class ChatOut(BaseModel):
    message: str = Field(description="Assistant reply extracted from the first choice.")


class ChatErrorOut(BaseModel):
    error: str = Field(
        description="Normalized failure message.", examples=["Messages are required"]
    )
