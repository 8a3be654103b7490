import logging
from typing import Optional, Dict, Any
import httpx
from config import settings

logger = logging.getLogger(__name__)

class BunnyService:
    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.api_key = settings.BUNNY_API_KEY or ""
        self.library_id = settings.BUNNY_LIBRARY_ID or ""
        self.embed_base = settings.BUNNY_EMBED_URL.rstrip("/")
        self.client = client or httpx.AsyncClient(base_url=settings.BUNNY_API_URL, timeout=None)

    @property
    def headers(self) -> Dict[str, str]:
        return {"AccessKey": self.api_key}

    async def close(self):
        await self.client.aclose()

    async def create_video(self, title: str) -> Dict[str, Any]:
        """Registers an empty video in the library. The response carries its `guid`."""
        response = await self.client.post(
            f"/library/{self.library_id}/videos",
            json={"title": title},
            headers=self.headers,
        )
        response.raise_for_status()
        return response.json()

    async def upload_video_content(self, guid: str, content: bytes) -> None:
        response = await self.client.put(
            f"/library/{self.library_id}/videos/{guid}",
            content=content,
            headers=self.headers,
        )
        response.raise_for_status()

    def embed_url(self, guid: str) -> str:
        return f"{self.embed_base}/{self.library_id}/{guid}"

    async def upload(self, filename: str, content: bytes) -> str:
        """Create, PUT the bytes, return the embed URL."""
        video = await self.create_video(filename)
        guid = video["guid"]
        logger.info("Bunny video initialized with GUID %s", guid)

        await self.upload_video_content(guid, content)
        logger.info("Bunny upload finished for %s", filename)
        return self.embed_url(guid)

def embed_url_for(video_url: Optional[str]) -> str:
    """
    Player URL for a stored video URL. Embed URLs and files in the storage
    bucket pass through; other URLs are mapped to the library by their last
    path segment when a library is set.
    """
    if not video_url:
        return ""
    embed_base = settings.BUNNY_EMBED_URL.rstrip("/")
    if video_url.startswith(embed_base):
        return video_url
    if video_url.startswith(settings.STORAGE_URL.rstrip("/") + "/"):
        return video_url
    if not settings.BUNNY_LIBRARY_ID:
        return video_url

    video_id = video_url.rstrip("/").split("/")[-1].split(".")[0]
    return f"{embed_base}/{settings.BUNNY_LIBRARY_ID}/{video_id}"
