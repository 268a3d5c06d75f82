import base64
import io
import os

os.environ.setdefault("SPORTIFY_GOOGLE_API_KEY", "test-key")

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from sportify.main import create_app
from sportify.models.briefing import BriefingDraft, Source


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeBriefingBackend:
    """Records prompts and answers with a fixed draft, a callable or an error."""

    name = "fake-text"

    def __init__(self, draft=None, error=None):
        self.draft = draft
        self.error = error
        self.prompts = []

    async def fetch_briefing(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if callable(self.draft):
            return self.draft(prompt)
        return self.draft


class FakeImageBackend:
    name = "fake-image"

    def __init__(self, image_ref="https://img.example/briefing.png", error=None):
        self.image_ref = image_ref
        self.error = error
        self.texts = []

    async def fetch_image(self, briefing_text):
        self.texts.append(briefing_text)
        if self.error is not None:
            raise self.error
        return self.image_ref


@pytest.fixture
def nba_draft():
    return BriefingDraft(
        text="## NBA\n* Team X won",
        sources=(Source(uri="http://a", title="A"),),
    )


@pytest.fixture
def text_backend(nba_draft):
    return FakeBriefingBackend(draft=nba_draft)


@pytest.fixture
def image_backend():
    return FakeImageBackend()


@pytest.fixture
def make_text_backend():
    return FakeBriefingBackend


@pytest.fixture
def make_image_backend():
    return FakeImageBackend


@pytest.fixture
def png_data_uri():
    buf = io.BytesIO()
    Image.new("RGB", (640, 360 + 85), "red").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode()


@pytest.fixture
def client(text_backend, png_data_uri):
    app = create_app(
        briefing_backend=text_backend,
        image_backend=FakeImageBackend(image_ref=png_data_uri),
    )
    with TestClient(app) as c:
        yield c
