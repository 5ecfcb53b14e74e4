"""Fetch remote article images so the frontend can load them same-origin."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx

from .errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; BusinessBites/1.0)"
CACHE_CONTROL = "public, max-age=86400"


class UpstreamError(Exception):
    pass


@dataclass(slots=True, frozen=True)
class ProxiedImage:
    content: bytes
    content_type: str


@dataclass(slots=True)
class ImageProxy:
    timeout: float = 10.0
    max_bytes: int = 5 * 1024 * 1024

    def fetch(self, url: str | None) -> ProxiedImage:
        _validate_url(url)
        try:
            with httpx.stream(
                "GET",
                url,  # type: ignore[arg-type]
                headers={"User-Agent": USER_AGENT, "Accept": "image/*"},
                timeout=self.timeout,
                follow_redirects=True,
            ) as response:
                content_type = self._check_response(url, response)
                content = self._read_limited(response)
        except httpx.HTTPError as exc:
            logger.warning("Image fetch failed for %s: %s", url, exc)
            raise UpstreamError(f"Failed to fetch image: {exc}") from exc

        logger.debug("Proxied %s bytes of %s from %s", len(content), content_type, url)
        return ProxiedImage(content=content, content_type=content_type)

    def _check_response(self, url: str | None, response: httpx.Response) -> str:
        if response.status_code >= 400:
            logger.info("Image fetch for %s returned %s", url, response.status_code)
            raise NotFoundError("Image not found", identifier=url)

        content_type = response.headers.get("content-type", "")
        if not content_type.startswith("image/"):
            raise ValidationError("URL does not point to an image")

        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            raise ValidationError("Image exceeds the maximum allowed size")
        return content_type

    def _read_limited(self, response: httpx.Response) -> bytes:
        buffer = bytearray()
        for chunk in response.iter_bytes():
            buffer.extend(chunk)
            if len(buffer) > self.max_bytes:
                raise ValidationError("Image exceeds the maximum allowed size")
        return bytes(buffer)


def _validate_url(url: str | None) -> None:
    if not url:
        raise ValidationError("URL parameter required")
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValidationError("Invalid URL format")
    if parsed.scheme != "https":
        raise ValidationError("Only HTTPS URLs are allowed")


__all__ = ["ImageProxy", "ProxiedImage", "UpstreamError", "CACHE_CONTROL"]
