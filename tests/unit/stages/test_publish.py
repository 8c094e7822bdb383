# tests/unit/stages/test_publish.py — v1
"""Tests for stages/publish.py — YouTube resumable upload flow."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from reelforge.core.errors import PublishError
from reelforge.core.models import ThumbnailAsset, UploadMetadata
from reelforge.stages.base import FailurePolicy
from reelforge.stages.publish import (
    THUMBNAIL_ENDPOINT,
    TOKEN_ENDPOINT,
    UPLOAD_ENDPOINT,
    YouTubePublisher,
)

SESSION_URL = "https://www.googleapis.com/upload/youtube/v3/videos?upload_id=xyz"


@pytest.fixture
def yt_settings(settings):
    return settings.model_copy(
        update={
            "youtube_client_id": "cid",
            "youtube_client_secret": "secret",
            "youtube_refresh_token": "refresh",
        }
    )


@pytest.fixture
def media(tmp_path):
    video = tmp_path / "short.mp4"
    video.write_bytes(b"video-bytes")
    thumb = tmp_path / "thumbnail.jpg"
    thumb.write_bytes(b"jpeg-bytes")
    metadata = UploadMetadata(
        title="Title",
        description="Desc",
        keywords=["AI"],
        scheduled_at=datetime(2026, 3, 1, 10, tzinfo=timezone.utc),
    )
    return str(video), ThumbnailAsset(path=str(thumb)), metadata


def _youtube(seen: list[httpx.Request], fail_on: str | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        url = str(request.url)
        if url.startswith(TOKEN_ENDPOINT):
            if fail_on == "token":
                return httpx.Response(401, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "tok"})
        if request.method == "POST" and url.startswith(UPLOAD_ENDPOINT):
            return httpx.Response(200, headers={"location": SESSION_URL})
        if request.method == "PUT":
            if fail_on == "upload":
                return httpx.Response(500, text="backend error")
            return httpx.Response(200, json={"id": "vid42"})
        if url.startswith(THUMBNAIL_ENDPOINT):
            return httpx.Response(200, json={})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestYouTubePublisher:
    def test_policy_absorbed(self, settings):
        assert YouTubePublisher(settings).policy is FailurePolicy.ABSORBED

    @pytest.mark.asyncio
    async def test_missing_credentials(self, settings, run_context, media):
        with pytest.raises(PublishError, match="credentials missing"):
            await YouTubePublisher(settings)(run_context, *media)

    @pytest.mark.asyncio
    async def test_full_flow(self, yt_settings, run_context, media):
        seen: list[httpx.Request] = []
        result = await YouTubePublisher(yt_settings, transport=_youtube(seen))(run_context, *media)

        assert result.video_id == "vid42"
        assert result.watch_url == "https://youtube.com/shorts/vid42"
        assert result.is_reachable
        assert [r.method for r in seen] == ["POST", "POST", "PUT", "POST"]

        session_body = json.loads(seen[1].content)
        assert session_body["snippet"]["title"] == "Title"
        assert session_body["status"]["privacyStatus"] == "unlisted"
        assert seen[1].headers["Authorization"] == "Bearer tok"
        assert seen[2].content == b"video-bytes"
        assert seen[3].url.params["videoId"] == "vid42"

    @pytest.mark.asyncio
    async def test_token_failure(self, yt_settings, run_context, media):
        seen: list[httpx.Request] = []
        stage = YouTubePublisher(yt_settings, transport=_youtube(seen, fail_on="token"))
        with pytest.raises(PublishError, match="refresh YouTube token 401"):
            await stage(run_context, *media)
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_upload_failure(self, yt_settings, run_context, media):
        stage = YouTubePublisher(yt_settings, transport=_youtube([], fail_on="upload"))
        with pytest.raises(PublishError, match="video upload failed"):
            await stage(run_context, *media)

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self, yt_settings, run_context, media):
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        stage = YouTubePublisher(yt_settings, transport=httpx.MockTransport(boom))
        with pytest.raises(PublishError, match="YouTube request failed"):
            await stage(run_context, *media)
