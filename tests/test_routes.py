"""
API route tests - request validation and error payloads for every endpoint.

Builds a bare FastAPI app around the router with fake collaborators, so
no keys, network or logging setup from comic_cover.main are needed.

Run with: python -m pytest tests/test_routes.py -v
"""

import base64
import sys
from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from comic_cover.api.routes import router, set_services
from comic_cover.services.cover import CoverService
from comic_cover.services.dialogue import DialogueService, PLACEHOLDER_TEXT
from comic_cover.services.cloudinary_storage import CloudinaryStorageService
from comic_cover.services.errors import GenerationError


COVER_BODY = {
    "gender": "Female",
    "childhood": "Invisible",
    "superpower": "Control time",
    "city": "Dubai",
    "fear": "Spiders",
    "fuel": "Family",
    "strength": "Calm",
    "lesson": "Be kind",
    "selfieUrl": "https://res.cloudinary.com/demo/selfie.png",
}


class FakeChat:
    def __init__(self, content="", error=None):
        self.content = content
        self.error = error

    async def chat_completion(self, messages, model, temperature=0.7, max_tokens=None, purpose=""):
        if self.error:
            raise self.error
        return {"content": self.content, "model": model, "usage": {}}


class FakeGeneration:
    def __init__(self, url="https://replicate.delivery/out.jpg", error=None):
        self.url = url
        self.error = error
        self.calls = []

    async def generate(self, prompt, selfie_url, seed=None):
        self.calls.append((prompt, selfie_url, seed))
        if self.error:
            raise self.error
        return self.url


class FakeUploader:
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else {
            "secure_url": "https://res.cloudinary.com/demo/comic-exports/page.png",
            "public_id": "comic-exports/page",
        }
        self.error = error
        self.calls = []

    def upload(self, file, **options):
        self.calls.append((file.read() if hasattr(file, "read") else file, options))
        if self.error:
            raise self.error
        return self.result


def build_client(name="Chrono Blaze", dialogue="[]", generation=None, chat_error=None, uploader=None):
    generation = generation or FakeGeneration()
    set_services(
        cover_service=CoverService(FakeChat(content=name), generation),
        generation_service=generation,
        dialogue_service=DialogueService(FakeChat(content=dialogue, error=chat_error)),
        storage_service=CloudinaryStorageService(
            cloud_name="demo", api_key="key", api_secret="secret",
            uploader=uploader or FakeUploader(),
        ),
    )
    app = FastAPI()
    app.include_router(router)
    return TestClient(app)


class TestGenerateCover:
    """POST /api/generate"""

    def teardown_method(self):
        set_services()

    def test_success_payload_and_cookie(self):
        client = build_client()

        response = client.post("/api/generate", json=COVER_BODY)

        assert response.status_code == 200
        assert response.json() == {
            "comicImageUrl": "https://replicate.delivery/out.jpg",
            "heroName": "Chrono Blaze",
            "superheroName": "Chrono Blaze",
            "issue": "01",
            "tagline": "Be kind",
        }
        cookie = response.headers["set-cookie"]
        assert "heroName=Chrono%20Blaze" in cookie
        assert "Max-Age=604800" in cookie
        assert "Path=/" in cookie
        assert "SameSite=Lax" in cookie

    def test_missing_inputs(self):
        client = build_client()
        body = {k: v for k, v in COVER_BODY.items() if k not in ("city", "fear")}

        response = client.post("/api/generate", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing inputs: city, fear"}

    def test_generation_failure(self):
        client = build_client(generation=FakeGeneration(error=GenerationError("failed")))

        response = client.post("/api/generate", json=COVER_BODY)

        assert response.status_code == 500
        assert response.json() == {"error": "Image generation failed or incomplete (status: failed)"}

    def test_invalid_json(self):
        client = build_client()

        response = client.post("/api/generate", content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_failed_request_does_not_affect_next(self):
        """A failed request leaves the server ready for the next one."""
        client = build_client()
        client.post("/api/generate", json={})

        response = client.post("/api/generate", json=COVER_BODY)

        assert response.status_code == 200


class TestGeneratePanel:
    """POST /api/generate-multi"""

    def teardown_method(self):
        set_services()

    def test_selfie_url(self):
        generation = FakeGeneration()
        client = build_client(generation=generation)

        response = client.post("/api/generate-multi", json={"prompt": "A panel", "selfieUrl": "https://img/s.png"})

        assert response.status_code == 200
        assert response.json() == {"comicImageUrl": "https://replicate.delivery/out.jpg"}
        assert generation.calls[0] == ("A panel", "https://img/s.png", None)

    def test_input_image_url_and_seed(self):
        """The story page sends the cover as inputImageUrl plus a seed."""
        generation = FakeGeneration()
        client = build_client(generation=generation)

        response = client.post(
            "/api/generate-multi",
            json={"prompt": "A panel", "inputImageUrl": "https://img/cover.jpg", "seed": 99},
        )

        assert response.status_code == 200
        assert generation.calls[0] == ("A panel", "https://img/cover.jpg", 99)

    def test_missing_prompt(self):
        generation = FakeGeneration()
        client = build_client(generation=generation)

        response = client.post("/api/generate-multi", json={"selfieUrl": "https://img/s.png"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing prompt or selfieUrl"}
        assert generation.calls == []

    def test_missing_image(self):
        client = build_client()

        response = client.post("/api/generate-multi", json={"prompt": "A panel"})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing prompt or selfieUrl"}

    def test_timeout_is_500(self):
        error = GenerationError("processing", "Image generation timed out after 60 status checks (status: processing)")
        client = build_client(generation=FakeGeneration(error=error))

        response = client.post("/api/generate-multi", json={"prompt": "A panel", "selfieUrl": "https://img/s.png"})

        assert response.status_code == 500
        assert "timed out" in response.json()["error"]


class TestGenerateDialogue:
    """POST /api/generate-dialogue"""

    def teardown_method(self):
        set_services()

    def test_dialogue_lines(self):
        raw = '[{"text": "Not today!", "speaker": "Nova"}]'
        client = build_client(dialogue=raw)

        response = client.post(
            "/api/generate-dialogue",
            json={"panelPrompt": "Rooftop", "userInputs": {"superheroName": "Nova", "fear": "spiders"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["dialogue"] == [{"text": "Not today!", "speaker": "Nova"}]
        assert data["raw"] == raw

    def test_malformed_output_gives_placeholder(self):
        client = build_client(dialogue="I am not JSON")

        response = client.post("/api/generate-dialogue", json={"panelPrompt": "Rooftop"})

        assert response.status_code == 200
        assert response.json()["dialogue"] == [{"text": PLACEHOLDER_TEXT, "speaker": "Hero"}]

    def test_chat_failure(self):
        client = build_client(chat_error=RuntimeError("invalid api key"))

        response = client.post("/api/generate-dialogue", json={"panelPrompt": "Rooftop", "userInputs": None})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate dialogue"}


class TestCloudinaryUpload:
    """POST /api/cloudinary-upload"""

    def teardown_method(self):
        set_services()

    def test_data_url_upload(self):
        uploader = FakeUploader()
        client = build_client(uploader=uploader)
        payload = "data:image/png;base64," + base64.b64encode(b"page-bytes").decode()

        response = client.post("/api/cloudinary-upload", json={"fileBase64": payload, "publicId": "page-1"})

        assert response.status_code == 200
        assert response.json() == {
            "secure_url": "https://res.cloudinary.com/demo/comic-exports/page.png",
            "public_id": "comic-exports/page",
        }
        data, options = uploader.calls[0]
        assert data == b"page-bytes"
        assert options["folder"] == "comic-exports"
        assert options["public_id"] == "page-1"

    def test_missing_file(self):
        client = build_client()

        response = client.post("/api/cloudinary-upload", json={"folder": "x"})

        assert response.status_code == 400
        assert response.json() == {"error": "fileBase64 is required"}

    def test_non_string_file(self):
        client = build_client()

        response = client.post("/api/cloudinary-upload", json={"fileBase64": 12345})

        assert response.status_code == 400
        assert response.json() == {"error": "fileBase64 is required"}

    def test_garbage_payload_rejected(self):
        """A payload that is not base64 never reaches the uploader."""
        uploader = FakeUploader()
        client = build_client(uploader=uploader)

        response = client.post("/api/cloudinary-upload", json={"fileBase64": "data:image/png;base64,not base64!!"})

        assert response.status_code == 400
        assert "not valid base64" in response.json()["error"]
        assert uploader.calls == []

    def test_provider_failure(self):
        client = build_client(uploader=FakeUploader(error=RuntimeError("Invalid API key")))
        payload = base64.b64encode(b"page-bytes").decode()

        response = client.post("/api/cloudinary-upload", json={"fileBase64": payload})

        assert response.status_code == 500
        assert response.json() == {"error": "Invalid API key"}


class TestHealth:
    def teardown_method(self):
        set_services()

    def test_health_reports_services(self):
        client = build_client()

        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert all(response.json()["services"].values())
