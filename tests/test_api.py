# tests/test_api.py
# End-to-end tests for the HTTP endpoints

import json
import re
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from ai.llm import LLMError
from be import models
from be.api import app
from be.db import get_session
from be.pipelines.submission import PitchSubmission, submit_pitch
from config.tag_vocabulary import STANDARD_TAGS

TIMESTAMP_RE = re.compile(r"^(Just now|\d+ hours? ago|\d+ days? ago)$")
UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")

TRANSCRIPT = "We build solar kites for remote villages. They charge batteries all night."


async def stored_pitches(session_maker):
    async with session_maker() as session:
        result = await session.execute(select(models.Pitch).order_by(models.Pitch.id))
        return list(result.scalars().all())


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestSubmitPitch:
    """POST /api/submit-pitch"""

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, client, session_maker):
        response = await client.post("/api/submit-pitch", json={"title": "", "transcript": "hello"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Title and transcript are required"}
        assert await stored_pitches(session_maker) == []

    @pytest.mark.asyncio
    async def test_missing_transcript_rejected(self, client):
        response = await client.post("/api/submit-pitch", json={"title": "A"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_whitespace_only_rejected(self, client):
        response = await client.post("/api/submit-pitch", json={"title": "   ", "transcript": "B"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_minimal_submission(self, client):
        response = await client.post("/api/submit-pitch", json={"title": "A", "transcript": "B"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert isinstance(body["pitch"]["id"], int)
        assert UUID_RE.match(body["pitch"]["uuid"])
        assert body["pitch"]["title"] == "A"
        assert body["pitch"]["status"] == "published"

    @pytest.mark.asyncio
    async def test_fields_trimmed_and_tags_cleaned(self, client, fake_llm, session_maker):
        fake_llm.replies = ['"Light after sunset."']
        response = await client.post(
            "/api/submit-pitch",
            json={
                "title": "  Solar Kites  ",
                "description": "  Power from the sky ",
                "transcript": f"  {TRANSCRIPT}  ",
                "audioUrl": " https://cdn.example.com/a.webm ",
                "tags": ["Foo", "Foo", " bar ", ""],
            },
        )
        assert response.status_code == 200

        [pitch] = await stored_pitches(session_maker)
        assert pitch.title == "Solar Kites"
        assert pitch.description == "Power from the sky"
        assert pitch.transcript == TRANSCRIPT
        assert pitch.audio_url == "https://cdn.example.com/a.webm"
        assert json.loads(pitch.tags) == ["Foo", "bar"]
        assert pitch.quote == "Light after sunset."
        assert pitch.status == "published"

    @pytest.mark.asyncio
    async def test_empty_tags_stored_as_null(self, client, session_maker):
        await client.post("/api/submit-pitch", json={"title": "A", "transcript": "B", "tags": []})
        await client.post("/api/submit-pitch", json={"title": "C", "transcript": "D", "tags": ["  "]})

        pitches = await stored_pitches(session_maker)
        assert [p.tags for p in pitches] == [None, None]

    @pytest.mark.asyncio
    async def test_quote_service_failure_does_not_block(self, client, fake_llm, session_maker):
        fake_llm.error = LLMError("service down")
        response = await client.post("/api/submit-pitch", json={"title": "A", "transcript": TRANSCRIPT})

        assert response.status_code == 200
        [pitch] = await stored_pitches(session_maker)
        assert pitch.quote == "We build solar kites for remote villages"

    @pytest.mark.asyncio
    async def test_raising_enricher_does_not_block(self, session):
        class BrokenEnricher:
            async def extract_quote(self, transcript):
                raise RuntimeError("unexpected")

        submitted = await submit_pitch(
            session,
            BrokenEnricher(),
            PitchSubmission(title="A", transcript="x" * 160),
        )

        pitch = await session.get(models.Pitch, submitted.id)
        assert pitch.quote == "x" * 97 + "..."

    @pytest.mark.asyncio
    async def test_duplicate_submissions_create_two_pitches(self, client, session_maker):
        first = await client.post("/api/submit-pitch", json={"title": "A", "transcript": "B"})
        second = await client.post("/api/submit-pitch", json={"title": "A", "transcript": "B"})

        assert first.json()["pitch"]["id"] != second.json()["pitch"]["id"]
        assert first.json()["pitch"]["uuid"] != second.json()["pitch"]["uuid"]
        assert len(await stored_pitches(session_maker)) == 2

    @pytest.mark.asyncio
    async def test_malformed_body(self, client):
        response = await client.post("/api/submit-pitch", json={"title": "A", "transcript": "B", "tags": "x"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, client):
        response = await client.get("/api/submit-pitch")
        assert response.status_code == 405
        assert response.json() == {"success": False, "error": "Method not allowed"}


class TestGetPitches:
    """GET /api/pitches"""

    @pytest.mark.asyncio
    async def test_feed_shape_and_order(self, client, session_maker):
        now = datetime.now(timezone.utc)
        async with session_maker() as session:
            newer = models.Pitch(
                title="Ocean Drones map reefs",
                transcript=TRANSCRIPT,
                created_at=now - timedelta(hours=2),
            )
            older = models.Pitch(
                title="Solar Kites",
                transcript="k" * 150,
                description="Kites that make power.",
                audio_url="https://cdn.example.com/a.webm",
                created_at=now - timedelta(days=2),
            )
            older.set_tags(["🌱 CleanTech"])
            session.add_all([newer, older])
            await session.commit()

        response = await client.get("/api/pitches")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        pitches = body["pitches"]
        assert [p["title"] for p in pitches] == ["Solar Kites", "Ocean Drones map reefs"]

        first = pitches[0]
        assert first["creator"] == "Solar Kites"
        assert first["avatar"] == "SK"
        assert first["quote"] == "k" * 100 + "..."
        assert first["summary"] == "Kites that make power."
        assert first["tags"] == ["🌱 CleanTech"]
        assert first["audioUrl"] == "https://cdn.example.com/a.webm"
        assert first["timestamp"] == "2 days ago"

        second = pitches[1]
        assert second["tags"] == []
        assert second["summary"] == TRANSCRIPT + "..."
        for pitch in pitches:
            assert TIMESTAMP_RE.match(pitch["timestamp"])

    @pytest.mark.asyncio
    async def test_submitted_pitch_appears(self, client, fake_llm):
        fake_llm.replies = ["Kites for every village."]
        await client.post(
            "/api/submit-pitch",
            json={"title": "Solar Kites", "transcript": TRANSCRIPT, "tags": ["🌱 CleanTech"]},
        )

        [pitch] = (await client.get("/api/pitches")).json()["pitches"]
        assert pitch["quote"] == "Kites for every village."
        assert pitch["timestamp"] == "Just now"
        assert pitch["transcript"] == TRANSCRIPT


class TestGetTags:
    """GET /api/tags"""

    @pytest.mark.asyncio
    async def test_catalog(self, client):
        await client.post("/api/submit-pitch", json={"title": "A", "transcript": "B", "tags": ["zeta", "🌊 Ocean"]})
        await client.post("/api/submit-pitch", json={"title": "C", "transcript": "D", "tags": ["Alpha", "zeta"]})

        response = await client.get("/api/tags")

        assert response.status_code == 200
        tags = response.json()["tags"]
        assert tags["standard"] == list(STANDARD_TAGS)
        assert tags["existing"] == ["zeta", "🌊 Ocean", "Alpha"]
        assert tags["all"][-2:] == ["Alpha", "zeta"]
        assert set(tags["all"][:len(STANDARD_TAGS)]) == set(STANDARD_TAGS)

    @pytest.mark.asyncio
    async def test_empty_database(self, client):
        tags = (await client.get("/api/tags")).json()["tags"]
        assert tags["existing"] == []
        assert sorted(tags["all"]) == sorted(STANDARD_TAGS)


class TestExtractQuote:
    """POST /api/extract-quote"""

    @pytest.mark.asyncio
    async def test_requires_transcript(self, client):
        response = await client.post("/api/extract-quote", json={})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Transcript is required"}

    @pytest.mark.asyncio
    async def test_returns_quote(self, client, fake_llm):
        fake_llm.replies = ['"Kites for every village."']
        response = await client.post("/api/extract-quote", json={"transcript": TRANSCRIPT})
        assert response.json() == {"success": True, "quote": "Kites for every village."}

    @pytest.mark.asyncio
    async def test_fallback_is_still_success(self, client, fake_llm):
        fake_llm.error = LLMError("down")
        response = await client.post("/api/extract-quote", json={"transcript": "z" * 200})

        assert response.status_code == 200
        assert response.json()["quote"] == "z" * 97 + "..."


class TestAnalyzeContent:
    """POST /api/analyze-content"""

    @pytest.mark.asyncio
    async def test_pitch_suggestions(self, client, fake_llm):
        fake_llm.replies = [json.dumps({"title": "Solar Kites", "summary": "Power.", "tags": ["🌱 CleanTech"]})]
        response = await client.post("/api/analyze-content", json={"content": TRANSCRIPT, "type": "pitch"})

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "suggestions": {"title": "Solar Kites", "summary": "Power.", "tags": ["🌱 CleanTech"]},
        }

    @pytest.mark.asyncio
    async def test_pitch_suggestions_fallback(self, client, fake_llm):
        fake_llm.replies = ["Sure! Here are some ideas"]
        response = await client.post("/api/analyze-content", json={"content": TRANSCRIPT, "type": "pitch"})

        suggestions = response.json()["suggestions"]
        assert suggestions["title"] == "We build solar kites for remote villages"
        assert suggestions["tags"] == ["🤖 AI/ML", "💸 Needs Funding", "Innovation"]

    @pytest.mark.asyncio
    async def test_legacy_transcript(self, client):
        response = await client.post(
            "/api/analyze-content",
            json={"transcript": "An ocean cleanup robot that needs funding"},
        )

        body = response.json()
        assert body["success"] is True
        assert body["analysis"]["source"] == "transcript"
        assert body["analysis"]["suggestedTags"] == ["🌱 CleanTech", "🌊 Ocean", "💸 Needs Funding"]
        assert [t["id"] for t in body["templates"]] == ["cleantech", "ocean", "funding"]

    @pytest.mark.asyncio
    async def test_legacy_image_analysis_without_matches(self, client):
        response = await client.post("/api/analyze-content", json={"imageAnalysis": "A photo of a bicycle"})

        body = response.json()
        assert body["analysis"]["source"] == "imageAnalysis"
        assert body["analysis"]["suggestedTags"] == []
        assert [t["id"] for t in body["templates"]] == ["general"]

    @pytest.mark.asyncio
    async def test_nothing_to_analyze(self, client):
        response = await client.post("/api/analyze-content", json={"type": "pitch"})
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestUpdateExistingQuotes:
    """POST /api/update-existing-quotes"""

    @pytest.mark.asyncio
    async def test_nothing_pending(self, client):
        response = await client.post("/api/update-existing-quotes")
        assert response.json() == {
            "success": True,
            "message": "All pitches already have quotes",
            "updated": 0,
        }

    @pytest.mark.asyncio
    async def test_backfills_missing_quotes(self, client, fake_llm, session_maker):
        async with session_maker() as session:
            session.add_all([
                models.Pitch(title="A", transcript=TRANSCRIPT),
                models.Pitch(title="B", transcript="Short one", quote="Already quoted"),
                models.Pitch(title="C", transcript="q" * 300, status=models.PitchStatus.DRAFT.value),
            ])
            await session.commit()
        fake_llm.replies = ['"Kites for every village."']

        response = await client.post("/api/update-existing-quotes")

        assert response.json() == {
            "success": True,
            "message": "Updated 2 pitches with quotes",
            "updated": 2,
        }
        quotes = [p.quote for p in await stored_pitches(session_maker)]
        # second pending row had no scripted reply and fell back
        assert quotes == ["Kites for every village.", "Already quoted", "q" * 97 + "..."]

    @pytest.mark.asyncio
    async def test_get_not_allowed(self, client):
        response = await client.get("/api/update-existing-quotes")
        assert response.status_code == 405


STORAGE_ERROR = "database is locked: /var/lib/catalyst/catalyst.db"


class UnavailableSession:
    """Session stand-in whose reads and writes all fail."""

    def add(self, instance):
        pass

    async def execute(self, *args, **kwargs):
        raise RuntimeError(STORAGE_ERROR)

    async def commit(self):
        raise RuntimeError(STORAGE_ERROR)

    async def rollback(self):
        pass


class TestStorageFailures:
    """Storage errors map to fixed 500 messages without internal detail"""

    @pytest.fixture
    def broken_storage(self, client):
        async def override_session():
            yield UnavailableSession()

        app.dependency_overrides[get_session] = override_session
        return client

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, body, message",
        [
            ("post", "/api/submit-pitch", {"title": "Kites", "transcript": TRANSCRIPT}, "Failed to submit pitch"),
            ("get", "/api/pitches", None, "Failed to fetch pitches"),
            ("get", "/api/tags", None, "Failed to fetch tags"),
            ("post", "/api/update-existing-quotes", None, "Failed to update existing quotes"),
        ],
    )
    async def test_fixed_message(self, broken_storage, method, path, body, message):
        if method == "post":
            response = await broken_storage.post(path, json=body)
        else:
            response = await broken_storage.get(path)

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": message}
        assert "database is locked" not in response.text
