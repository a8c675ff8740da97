from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Liveness of the relay process (the provider is not contacted)."""

    status: Literal["ok"] = Field(
        description="`ok` while the relay process is up and serving requests.",
        examples=["ok"],
    )
