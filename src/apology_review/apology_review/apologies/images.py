from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlsplit

import structlog

from ..core.constants import DEFAULT_IMAGE_BASE_URL, DEFAULT_PLACEHOLDER_IMAGE_URL

log = structlog.get_logger(__name__)


class ImageURLResolver:
    """Turn an attachment path into an absolute URL the browser can fetch.

    Relative paths (including Windows-style ``uploads\\a.png``) are joined onto
    a fixed base origin. Returns None when there is nothing to render; never
    raises.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_IMAGE_BASE_URL,
        *,
        placeholder_url: str = DEFAULT_PLACEHOLDER_IMAGE_URL,
    ):
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._placeholder_url = placeholder_url

    @property
    def placeholder_url(self) -> str:
        return self._placeholder_url

    def resolve(self, path: object) -> Optional[str]:
        if not isinstance(path, str) or not path.strip():
            return None

        if path.startswith("http://") or path.startswith("https://"):
            return path

        cleaned = path.replace("\\", "/")
        try:
            url = urljoin(self._base_url, cleaned)
            parts = urlsplit(url)
        except ValueError as e:
            log.warning("image_url_unresolvable", path=path, error=str(e))
            return None

        if parts.scheme not in {"http", "https"} or not parts.netloc:
            log.warning("image_url_unresolvable", path=path, url=url)
            return None
        return url

    def resolve_or_placeholder(self, path: object) -> str:
        return self.resolve(path) or self._placeholder_url
