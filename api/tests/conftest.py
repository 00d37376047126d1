import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.rate_limiter import rate_limiter
from app.dependencies import get_upload_relay
from app.main import app
from app.services.upload_relay import UploadRelay

UPSTREAM_URL = "http://scoring.test/predict"


class StubUpstream:
    """Mock scoring service: records every forwarded request and answers with a canned reply."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload: dict = {"prediksi": "Data Science"}
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)


def file_part(request: httpx.Request) -> tuple[str, bytes]:
    """Split the single part of a forwarded multipart body into (headers, body)."""
    boundary = request.headers["content-type"].split("boundary=", 1)[1].encode()
    part = request.content.split(b"--" + boundary)[1]
    headers, _, body = part.partition(b"\r\n\r\n")
    return headers.decode(), body[:-2]


@pytest.fixture
def upstream() -> StubUpstream:
    return StubUpstream()


@pytest.fixture
def relay(upstream: StubUpstream) -> UploadRelay:
    return UploadRelay(UPSTREAM_URL, transport=httpx.MockTransport(upstream))


@pytest.fixture
def client(relay: UploadRelay):
    rate_limiter.reset()
    app.dependency_overrides[get_upload_relay] = lambda: relay
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def jane_doe() -> dict:
    return {
        "fullName": "Jane Doe",
        "title": "Engineer",
        "email": "jane@x.com",
        "phone": "555-1234",
        "summary": "Backend engineer who likes small, boring services.",
        "education": [],
        "workExperience": [
            {"company": "Acme", "position": "Dev", "year": "2020-2022", "description": "Built things."},
        ],
        "skills": ["Go", "SQL"],
    }
