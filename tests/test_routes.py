import io

from PIL import Image


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_topics(client):
    resp = client.get("/api/topics")
    assert resp.status_code == 200
    assert "Basketball" in resp.json()


def test_initial_state_is_idle(client):
    state = client.get("/api/state").json()
    assert state == {
        "topics": [],
        "query": "",
        "is_loading": False,
        "progress_message": "",
        "error": None,
        "result": None,
    }


def test_topic_and_query_are_mutually_exclusive(client):
    client.put("/api/selection/query", json={"query": "UFC 303"})
    state = client.post("/api/selection/topics/Tennis").json()
    assert state["topics"] == ["Tennis"]
    assert state["query"] == ""

    state = client.put("/api/selection/query", json={"query": "Wimbledon"}).json()
    assert state["topics"] == []
    assert state["query"] == "Wimbledon"


def test_submit_without_selection_is_rejected(client, text_backend):
    resp = client.post("/api/briefings/topics")
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Please select sports or enter a search query."
    assert client.get("/api/state").json()["error"] == "Please select sports or enter a search query."
    assert text_backend.prompts == []


def test_submit_blank_query_is_rejected(client, text_backend):
    client.put("/api/selection/query", json={"query": "   "})
    resp = client.post("/api/briefings/query")
    assert resp.status_code == 422
    assert text_backend.prompts == []


def test_submit_from_topics(client, text_backend):
    client.post("/api/selection/topics/NBA")

    resp = client.post("/api/briefings/topics?wait=true")

    assert resp.status_code == 200
    body = resp.json()
    assert body["generation"] == 1
    result = body["state"]["result"]
    assert result["text"] == "## NBA\n* Team X won"
    assert result["sources"] == [{"uri": "http://a", "title": "A"}]
    assert result["image_ref"].startswith("data:image/png;base64,")
    assert body["state"]["is_loading"] is False
    assert "NBA" in text_backend.prompts[0]


def test_submit_from_query(client, text_backend):
    client.put("/api/selection/query", json={"query": "  UFC 303 "})

    resp = client.post("/api/briefings/query?wait=true")

    assert resp.status_code == 200
    assert 'for the topic: "UFC 303"' in text_backend.prompts[0]


def test_direct_submission(client):
    resp = client.post("/api/briefings?wait=true", json={"topics": ["Golf"]})
    assert resp.status_code == 200
    assert resp.json()["state"]["result"] is not None


def test_image_requires_a_result(client):
    assert client.get("/api/briefing/image").status_code == 404


def test_image_is_composited_to_requested_size(client):
    client.post("/api/briefings?wait=true", json={"topics": ["Golf"]})

    resp = client.get("/api/briefing/image?width=320&height=200")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert Image.open(io.BytesIO(resp.content)).size == (320, 200)


def test_clear_briefing(client):
    client.post("/api/briefings?wait=true", json={"topics": ["Golf"]})

    state = client.delete("/api/briefing").json()

    assert state["result"] is None
    assert state["error"] is None


def test_websocket_sends_state(client):
    with client.websocket_connect("/ws/briefings") as ws:
        message = ws.receive_json()
        assert message["type"] == "state"
        assert message["state"]["is_loading"] is False


def test_websocket_pushes_run_transitions(client):
    with client.websocket_connect("/ws/briefings") as ws:
        assert ws.receive_json()["state"]["is_loading"] is False

        client.post("/api/briefings?wait=true", json={"topics": ["Golf"]})

        states = [ws.receive_json()["state"] for _ in range(3)]
        assert [s["is_loading"] for s in states] == [True, True, False]
        assert states[0]["progress_message"] == "Analyzing the latest sports news..."
        assert states[-1]["result"]["text"] == "## NBA\n* Team X won"


def test_rejected_submission_keeps_previous_image(client):
    client.post("/api/briefings?wait=true", json={"topics": ["Golf"]})

    resp = client.post("/api/briefings/topics")

    assert resp.status_code == 422
    state = client.get("/api/state").json()
    assert state["error"] == "Please select sports or enter a search query."
    assert state["result"] is not None
    assert client.get("/api/briefing/image").status_code == 200


def test_image_rendering_runs_off_the_event_loop(client, monkeypatch):
    from sportify import main

    calls = []

    async def recording_threadpool(func, *args, **kwargs):
        calls.append(func)
        return func(*args, **kwargs)

    monkeypatch.setattr(main, "run_in_threadpool", recording_threadpool)
    client.post("/api/briefings?wait=true", json={"topics": ["Golf"]})

    resp = client.get("/api/briefing/image?width=320&height=200")

    assert resp.status_code == 200
    assert calls == [main.render_png]
    assert Image.open(io.BytesIO(resp.content)).size == (320, 200)
