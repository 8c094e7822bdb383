# src/stages/publish.py — v1
"""Publishing to YouTube Shorts through the Data API v3 resumable upload.

Flow: refresh an OAuth access token, open an upload session carrying the
snippet/status metadata, PUT the video bytes, then set the thumbnail.
Every failure surfaces as PublishError; the orchestrator absorbs it.
"""

from __future__ import annotations

from pathlib import Path

import httpx

from reelforge.config.settings import Settings
from reelforge.core.errors import PublishError
from reelforge.core.models import ThumbnailAsset, UploadMetadata, UploadResult
from reelforge.stages.base import BaseStage, FailurePolicy, RunContext

TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
UPLOAD_ENDPOINT = "https://www.googleapis.com/upload/youtube/v3/videos"
THUMBNAIL_ENDPOINT = "https://www.googleapis.com/upload/youtube/v3/thumbnails/set"
WATCH_URL_TEMPLATE = "https://youtube.com/shorts/{video_id}"


class YouTubePublisher(BaseStage):
    """Upload the short and its thumbnail."""

    name = "publish"
    policy = FailurePolicy.ABSORBED

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = settings.youtube_client_id
        self._client_secret = settings.youtube_client_secret
        self._refresh_token = settings.youtube_refresh_token
        self._category_id = settings.youtube_category_id
        self._privacy_status = settings.youtube_privacy_status
        self._timeout = settings.http_timeout_seconds
        self._upload_timeout = settings.upload_timeout_seconds
        self._transport = transport

    async def __call__(
        self,
        ctx: RunContext,
        video_path: str,
        thumbnail: ThumbnailAsset,
        metadata: UploadMetadata,
    ) -> UploadResult:
        if not (self._client_id and self._client_secret and self._refresh_token):
            raise PublishError("YouTube OAuth credentials missing.")

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                access_token = await self._access_token(client)
                session_url = await self._open_session(client, access_token, metadata)
                await ctx.logger("YouTube session created", session_url=session_url)

                video_id = await self._upload_video(client, access_token, session_url, video_path)
                await ctx.logger("Video uploaded", video_id=video_id)

                await self._upload_thumbnail(client, access_token, video_id, thumbnail)
                await ctx.logger("Thumbnail uploaded", video_id=video_id)
            except httpx.HTTPError as e:
                raise PublishError(f"YouTube request failed: {e}") from e

        return UploadResult(video_id=video_id, watch_url=WATCH_URL_TEMPLATE.format(video_id=video_id))

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            TOKEN_ENDPOINT,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": self._refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if response.status_code >= 400:
            raise PublishError(f"Failed to refresh YouTube token {response.status_code}")
        token = response.json().get("access_token")
        if not token:
            raise PublishError("YouTube token response missing access_token")
        return token

    async def _open_session(
        self, client: httpx.AsyncClient, access_token: str, metadata: UploadMetadata
    ) -> str:
        response = await client.post(
            UPLOAD_ENDPOINT,
            params={"uploadType": "resumable", "part": "snippet,status"},
            headers={
                "Authorization": f"Bearer {access_token}",
                "X-Upload-Content-Type": "video/mp4",
            },
            json={
                "snippet": {
                    "title": metadata.title,
                    "description": metadata.description,
                    "tags": metadata.keywords,
                    "categoryId": self._category_id,
                },
                "status": {
                    "privacyStatus": self._privacy_status,
                    "publishAt": metadata.scheduled_at.isoformat(),
                    "selfDeclaredMadeForKids": False,
                },
            },
        )
        if response.status_code >= 400:
            raise PublishError(f"Failed creating upload session: {response.text}")
        location = response.headers.get("location")
        if not location:
            raise PublishError("YouTube upload location missing.")
        return location

    async def _upload_video(
        self, client: httpx.AsyncClient, access_token: str, session_url: str, video_path: str
    ) -> str:
        content = Path(video_path).read_bytes()
        response = await client.put(
            session_url,
            content=content,
            headers={"Authorization": f"Bearer {access_token}", "Content-Type": "video/mp4"},
            timeout=self._upload_timeout,
        )
        if response.status_code >= 400:
            raise PublishError(f"YouTube video upload failed: {response.text}")
        video_id = response.json().get("id")
        if not video_id:
            raise PublishError("YouTube upload response missing video id")
        return video_id

    async def _upload_thumbnail(
        self,
        client: httpx.AsyncClient,
        access_token: str,
        video_id: str,
        thumbnail: ThumbnailAsset,
    ) -> None:
        response = await client.post(
            THUMBNAIL_ENDPOINT,
            params={"videoId": video_id, "uploadType": "media"},
            content=Path(thumbnail.path).read_bytes(),
            headers={"Authorization": f"Bearer {access_token}", "Content-Type": "image/jpeg"},
        )
        if response.status_code >= 400:
            raise PublishError(f"Thumbnail upload failed: {response.text}")
