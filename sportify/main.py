"""Sportify — FastAPI application entry point."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from sportify.backends.base import BriefingBackend, ImageBackend
from sportify.backends.gemini import GeminiBriefingClient
from sportify.backends.image_loader import ImageLoadError, load_image_bytes
from sportify.backends.imagen import ImagenImageClient
from sportify.backends.pollinations import PollinationsImageClient
from sportify.config import Settings, settings
from sportify.errors import ValidationError
from sportify.models.selection import SPORTS, TopicSelection
from sportify.models.state import RequestState
from sportify.orchestrator import compositor
from sportify.orchestrator.briefing import BriefingOrchestrator, BriefingRun

logger = logging.getLogger(__name__)


# --- Request / Response models ---


class SourceModel(BaseModel):
    uri: str
    title: str


class ResultModel(BaseModel):
    text: str
    image_ref: str
    sources: list[SourceModel]


class PresentationState(BaseModel):
    topics: list[str]
    query: str
    is_loading: bool
    progress_message: str
    error: str | None
    result: ResultModel | None


class QueryUpdate(BaseModel):
    query: str


class BriefingSubmission(BaseModel):
    topics: list[str] = []
    query: str | None = None


class SubmissionResponse(BaseModel):
    generation: int
    state: PresentationState


# --- Wiring ---


class BriefingSession:
    """Input selection, orchestrator and WebSocket listeners for one app."""

    def __init__(self, briefing_backend: BriefingBackend, image_backend: ImageBackend) -> None:
        self.selection = TopicSelection()
        self.connections: list[WebSocket] = []
        self.tasks: set[asyncio.Task] = set()
        self.orchestrator = BriefingOrchestrator(
            briefing_backend, image_backend, on_change=self._on_state_change
        )

    def snapshot(self) -> PresentationState:
        return _presentation(self.selection, self.orchestrator.state)

    async def broadcast(self, message: dict) -> None:
        """Send a message to every connected WebSocket client."""
        for ws in list(self.connections):
            try:
                await ws.send_json(message)
            except Exception:
                logger.debug("Dropping dead WebSocket connection")
                self.connections.remove(ws)

    async def _on_state_change(self, state: RequestState) -> None:
        await self.broadcast({"type": "state", "state": self.snapshot().model_dump()})

    def start(self, run: BriefingRun) -> asyncio.Task:
        """Run a briefing in the background so the POST returns fast."""
        task = asyncio.create_task(self.orchestrator.execute(run))
        self.tasks.add(task)
        task.add_done_callback(self.tasks.discard)
        return task


def _presentation(selection: TopicSelection, state: RequestState) -> PresentationState:
    result = None
    if state.result is not None:
        result = ResultModel(
            text=state.result.text,
            image_ref=state.result.image_ref,
            sources=[SourceModel(uri=s.uri, title=s.title) for s in state.result.sources],
        )
    return PresentationState(
        topics=list(selection.topics),
        query=selection.query,
        is_loading=state.is_loading,
        progress_message=state.progress_message,
        error=state.error,
        result=result,
    )


def render_png(data: bytes | None, width: int, height: int, band: int) -> bytes:
    """Composite image bytes into a PNG of the requested size."""
    return compositor.to_png(compositor.render(data, width, height, band=band))


def build_briefing_backend(config: Settings) -> BriefingBackend:
    return GeminiBriefingClient(
        api_key=config.google_api_key,
        model=config.text_model,
        api_base=config.api_base,
        timeout=config.request_timeout,
    )


def build_image_backend(config: Settings) -> ImageBackend:
    """Pick the image strategy named in the configuration."""
    if config.image_strategy == "imagen":
        return ImagenImageClient(
            api_key=config.google_api_key,
            model=config.image_model,
            api_base=config.api_base,
            aspect_ratio=config.image_aspect_ratio,
            mime_type=config.image_mime_type,
            prompt_chars=config.image_prompt_chars,
            timeout=config.request_timeout,
        )
    if config.image_strategy == "pollinations":
        return PollinationsImageClient(
            width=config.image_width,
            height=config.image_height,
            prompt_chars=config.image_prompt_chars,
        )
    raise ValueError(f"Unknown image strategy: {config.image_strategy}")


def create_app(
    config: Settings | None = None,
    briefing_backend: BriefingBackend | None = None,
    image_backend: ImageBackend | None = None,
) -> FastAPI:
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        session = BriefingSession(
            briefing_backend or build_briefing_backend(config),
            image_backend or build_image_backend(config),
        )
        app.state.session = session
        logger.info(
            "Sportify ready (text=%s, image=%s)",
            session.orchestrator.briefing_backend.name,
            session.orchestrator.image_backend.name,
        )
        yield
        for task in list(session.tasks):
            task.cancel()

    app = FastAPI(
        title="Sportify",
        description="AI sports briefings with grounding sources and artwork",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": exc.message})

    def _session(request: Request) -> BriefingSession:
        return request.app.state.session

    # --- Routes ---

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/topics")
    async def list_topics() -> list[str]:
        return list(SPORTS)

    @app.get("/api/state", response_model=PresentationState)
    async def get_state(request: Request):
        return _session(request).snapshot()

    @app.post("/api/selection/topics/{name}", response_model=PresentationState)
    async def toggle_topic(name: str, request: Request):
        session = _session(request)
        session.selection.toggle_topic(name)
        return session.snapshot()

    @app.put("/api/selection/query", response_model=PresentationState)
    async def set_query(update: QueryUpdate, request: Request):
        session = _session(request)
        session.selection.set_query(update.query)
        return session.snapshot()

    async def _submit(
        session: BriefingSession, topics: list[str], query: str | None, wait: bool
    ) -> JSONResponse:
        if session.orchestrator.state.is_loading:
            raise HTTPException(status_code=409, detail="A briefing is already being generated")

        run = await session.orchestrator.begin(topics, query)
        task = session.start(run)
        status_code = 202
        if wait:
            await task
            status_code = 200
        body = SubmissionResponse(generation=run.generation, state=session.snapshot())
        return JSONResponse(status_code=status_code, content=body.model_dump())

    @app.post("/api/briefings/topics", response_model=SubmissionResponse)
    async def submit_from_topics(request: Request, wait: bool = Query(False)):
        """Generate a briefing for the selected topics."""
        session = _session(request)
        return await _submit(session, list(session.selection.topics), None, wait)

    @app.post("/api/briefings/query", response_model=SubmissionResponse)
    async def submit_from_query(request: Request, wait: bool = Query(False)):
        """Generate a deep-dive briefing for the typed query."""
        session = _session(request)
        return await _submit(session, [], session.selection.query, wait)

    @app.post("/api/briefings", response_model=SubmissionResponse)
    async def submit_briefing(
        submission: BriefingSubmission, request: Request, wait: bool = Query(False)
    ):
        """Generate a briefing for explicit topics or a query.

        Returns immediately with 202; connect to /ws/briefings for progress,
        or pass ?wait=true to block until the run finishes.
        """
        return await _submit(_session(request), submission.topics, submission.query, wait)

    @app.delete("/api/briefing", response_model=PresentationState)
    async def clear_briefing(request: Request):
        """Drop the current result; a run still in flight will be discarded."""
        session = _session(request)
        await session.orchestrator.reset()
        return session.snapshot()

    @app.get("/api/briefing/image")
    async def briefing_image(
        request: Request,
        width: int = Query(1024, ge=1, le=4096),
        height: int = Query(384, ge=1, le=4096),
    ):
        """Render the current briefing image cropped and cover-fitted as PNG."""
        state = _session(request).orchestrator.state
        if state.result is None:
            raise HTTPException(status_code=404, detail="No briefing image available")

        try:
            data = await load_image_bytes(state.result.image_ref, timeout=config.request_timeout)
        except ImageLoadError as exc:
            logger.error("%s", exc)
            data = None

        png = await run_in_threadpool(render_png, data, width, height, config.watermark_band)
        return Response(content=png, media_type="image/png")

    # --- WebSocket ---

    @app.websocket("/ws/briefings")
    async def briefings_ws(websocket: WebSocket):
        """Stream presentation state on every transition."""
        session: BriefingSession = websocket.app.state.session
        await websocket.accept()
        session.connections.append(websocket)
        try:
            await websocket.send_json({"type": "state", "state": session.snapshot().model_dump()})
            while True:
                # Push-only channel; reads only detect the disconnect.
                await websocket.receive_text()
        except WebSocketDisconnect:
            if websocket in session.connections:
                session.connections.remove(websocket)

    return app


app = create_app()


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run("sportify.main:app", host=settings.host, port=settings.port)
