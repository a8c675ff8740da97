from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RelaySuccess:
    content: str


@dataclass(frozen=True)
class RelayFailure:
    message: str
    status: int = 500


RelayOutcome = RelaySuccess | RelayFailure
