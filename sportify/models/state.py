"""Request state owned by the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sportify.models.briefing import BriefingResult


class RequestStatus(Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class RequestState:
    """Exactly one of Idle, InFlight, Succeeded or Failed."""

    status: RequestStatus = RequestStatus.IDLE
    progress_message: str = ""
    result: BriefingResult | None = None
    error: str | None = None

    @classmethod
    def idle(cls) -> RequestState:
        return cls()

    @classmethod
    def in_flight(cls, progress_message: str) -> RequestState:
        return cls(status=RequestStatus.IN_FLIGHT, progress_message=progress_message)

    @classmethod
    def succeeded(cls, result: BriefingResult) -> RequestState:
        return cls(status=RequestStatus.SUCCEEDED, result=result)

    @classmethod
    def failed(cls, error: str, result: BriefingResult | None = None) -> RequestState:
        return cls(status=RequestStatus.FAILED, error=error, result=result)

    @property
    def is_loading(self) -> bool:
        return self.status is RequestStatus.IN_FLIGHT
