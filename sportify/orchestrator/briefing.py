"""Briefing orchestrator — prompt, text, image, with a small state machine."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable

from sportify.backends.base import BriefingBackend, ImageBackend
from sportify.errors import BriefingError, EmptyContentError, ValidationError
from sportify.models.briefing import BriefingRequest, BriefingResult
from sportify.models.state import RequestState
from sportify.orchestrator.prompt_builder import build_prompt

logger = logging.getLogger(__name__)

ANALYZING_MESSAGE = "Analyzing the latest sports news..."
IMAGE_MESSAGE = "Creating a unique image for your briefing..."
NO_CONTENT_MESSAGE = "Failed to generate a briefing. The AI model returned no content."
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."

StateListener = Callable[[RequestState], Awaitable[None]]


@dataclass(frozen=True)
class BriefingRun:
    """One accepted submission, tagged with its generation number."""

    generation: int
    request: BriefingRequest


class BriefingOrchestrator:
    """Runs prompt → briefing → image and owns the single RequestState.

    Each accepted submission bumps a generation counter. A run that finishes
    after a newer one has started is dropped instead of overwriting state.
    """

    def __init__(
        self,
        briefing_backend: BriefingBackend,
        image_backend: ImageBackend,
        on_change: StateListener | None = None,
    ) -> None:
        self.briefing_backend = briefing_backend
        self.image_backend = image_backend
        self.on_change = on_change
        self._state = RequestState.idle()
        self._generation = 0

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    async def begin(
        self, topics: Iterable[str] = (), query: str | None = None
    ) -> BriefingRun:
        """Validate a submission and enter InFlight.

        Raises ValidationError (after recording it as Failed) when there is
        nothing to brief on; no backend is called in that case.
        """
        try:
            request = BriefingRequest.from_inputs(topics, query)
        except ValidationError as exc:
            logger.info("Rejected empty briefing submission")
            # Only the error changes; the previous briefing stays visible.
            await self._set_state(RequestState.failed(exc.message, result=self._state.result))
            raise

        self._generation += 1
        run = BriefingRun(generation=self._generation, request=request)
        logger.info(
            "Briefing run %d started (topics=%s, query=%r)",
            run.generation, list(request.topics), request.query,
        )
        await self._set_state(RequestState.in_flight(ANALYZING_MESSAGE))
        return run

    async def execute(self, run: BriefingRun) -> RequestState:
        """Drive a run to Succeeded or Failed and return the resulting state."""
        try:
            result = await self._produce(run)
        except BriefingError as exc:
            logger.error("Briefing run %d failed: %s", run.generation, exc.message)
            return await self._finish(run, RequestState.failed(exc.message))
        except Exception:
            logger.exception("Briefing run %d failed unexpectedly", run.generation)
            return await self._finish(run, RequestState.failed(UNKNOWN_ERROR_MESSAGE))

        if result is None:
            return self._state
        return await self._finish(run, RequestState.succeeded(result))

    async def submit(
        self, topics: Iterable[str] = (), query: str | None = None
    ) -> RequestState:
        """Validate and run a submission to completion."""
        run = await self.begin(topics, query)
        return await self.execute(run)

    async def reset(self) -> None:
        """Return to Idle and invalidate any run still in flight."""
        self._generation += 1
        await self._set_state(RequestState.idle())

    async def _produce(self, run: BriefingRun) -> BriefingResult | None:
        prompt = build_prompt(run.request.topics, run.request.query)
        draft = await self.briefing_backend.fetch_briefing(prompt)
        if not draft or not draft.text:
            raise EmptyContentError(NO_CONTENT_MESSAGE)

        if not self._is_current(run):
            return None
        await self._set_state(RequestState.in_flight(IMAGE_MESSAGE))

        # Image failures fail the whole briefing.
        image_ref = await self.image_backend.fetch_image(draft.text)
        return BriefingResult(text=draft.text, image_ref=image_ref, sources=draft.sources)

    async def _finish(self, run: BriefingRun, state: RequestState) -> RequestState:
        if not self._is_current(run):
            logger.info(
                "Discarding stale briefing run %d (current is %d)",
                run.generation, self._generation,
            )
            return self._state
        await self._set_state(state)
        return state

    def _is_current(self, run: BriefingRun) -> bool:
        return run.generation == self._generation

    async def _set_state(self, state: RequestState) -> None:
        self._state = state
        if self.on_change is None:
            return
        try:
            await self.on_change(state)
        except Exception:
            logger.exception("State listener failed")
