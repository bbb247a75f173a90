from __future__ import annotations

from dataclasses import dataclass

from .apologies.http_apology_repository import HttpApologyRepository
from .apologies.images import ImageURLResolver
from .apologies.mysql_apology_repository import MySQLApologyRepository
from .apologies.repository import ApologyRepository
from .apologies.service import ApologyReviewService
from .core.constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_IMAGE_BASE_URL, DEFAULT_PLACEHOLDER_IMAGE_URL
from .database.connection import DBConfig, DatabaseConnection


@dataclass(frozen=True)
class Container:
    apologies_repo: ApologyRepository
    image_resolver: ImageURLResolver

    apology_service: ApologyReviewService


def build_repository(settings) -> ApologyRepository:
    backend = str(getattr(settings, "APOLOGY_BACKEND", "mysql")).lower()
    if backend == "http":
        return HttpApologyRepository(
            str(getattr(settings, "API_BASE_URL")),
            token=getattr(settings, "API_TOKEN", None) or None,
            timeout=float(getattr(settings, "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
        )
    if backend == "mysql":
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        return MySQLApologyRepository(conn)
    raise ValueError(f"Unknown APOLOGY_BACKEND: {backend!r}")


def build_container(settings, *, repository: ApologyRepository | None = None) -> Container:
    apologies_repo = repository or build_repository(settings)
    image_resolver = ImageURLResolver(
        getattr(settings, "IMAGE_BASE_URL", DEFAULT_IMAGE_BASE_URL),
        placeholder_url=getattr(settings, "PLACEHOLDER_IMAGE_URL", DEFAULT_PLACEHOLDER_IMAGE_URL),
    )
    apology_service = ApologyReviewService(apologies_repo, image_resolver)

    return Container(
        apologies_repo=apologies_repo,
        image_resolver=image_resolver,
        apology_service=apology_service,
    )
