"""Flask JSON API serving business bites, search and read-later bookmarks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask, Response, jsonify, request

from .config import Settings, get_settings
from .db import init_db, session_scope
from .errors import InfrastructureError, NotFoundError, ValidationError
from .image_proxy import CACHE_CONTROL, ImageProxy, UpstreamError
from .pagination import PageResult
from .repository import add_bookmark, list_bookmarks, remove_bookmark
from .service import SEARCH_DEFAULT_LIMIT, ArticleService, normalize_market
from .sources import build_row_sources


logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    service: ArticleService | None = None,
    image_proxy: ImageProxy | None = None,
) -> Flask:
    app = Flask(__name__)
    current_settings = settings or get_settings()
    app.config["SETTINGS"] = current_settings

    init_db()
    if service is None:
        service = ArticleService(build_row_sources(current_settings))
    if image_proxy is None:
        image_proxy = ImageProxy(
            timeout=current_settings.image_proxy_timeout_seconds,
            max_bytes=current_settings.image_proxy_max_bytes,
        )
    app.extensions["article_service"] = service

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
        return jsonify({"error": str(exc), "id": exc.identifier}), 404

    @app.errorhandler(InfrastructureError)
    def handle_infrastructure_error(exc: InfrastructureError):
        logger.error("Backend failure: %s", exc)
        return jsonify({"error": str(exc)}), 500

    @app.get("/health")
    def health():
        return jsonify(
            {
                "status": "healthy",
                "timestamp": _now_iso(),
                "sources": service.source_names,
            }
        )

    @app.get("/api/test")
    def api_test():
        return jsonify(
            {
                "message": "Business Bites API working",
                "timestamp": _now_iso(),
                "sources": service.source_names,
            }
        )

    @app.get("/api/markets")
    def markets():
        return jsonify({"markets": service.list_markets()})

    @app.get("/api/sectors")
    def sectors():
        raw_market = request.args.get("market")
        market = normalize_market(raw_market) if raw_market else None
        return jsonify({"sectors": service.list_sectors(market)})

    @app.get("/api/news/business-bites/", strict_slashes=False)
    def business_bites():
        market = normalize_market(request.args.get("market"), current_settings.default_market)
        page = _parse_positive_int(request.args.get("page"), default=1, minimum=1)
        sector = (request.args.get("sector") or "").strip() or None
        try:
            payload = service.business_bites(market, page, sector=sector)
        except InfrastructureError as exc:
            logger.error("Business bites failed for market %s: %s", market, exc)
            return (
                jsonify(
                    {
                        "error": str(exc) or "Database query failed",
                        "market": market,
                        "articles": [],
                        "pagination": PageResult.empty().to_dict(),
                    }
                ),
                500,
            )
        return jsonify(payload)

    @app.get("/api/news/business-bites/article/<story_id>")
    def business_bite_article(story_id: str):
        return jsonify({"article": service.get_article(story_id)})

    @app.get("/api/search-similar")
    def search_similar():
        market = normalize_market(request.args.get("market"), current_settings.default_market)
        limit = _parse_positive_int(
            request.args.get("limit"), default=SEARCH_DEFAULT_LIMIT, minimum=1, maximum=50
        )
        return jsonify(service.search(request.args.get("query"), market, limit))

    @app.get("/api/user/read-later")
    def read_later_list():
        user_id = request.args.get("user_id", "")
        with session_scope() as session:
            bookmarks = [bookmark.to_dict() for bookmark in list_bookmarks(session, user_id)]
        return jsonify({"bookmarks": bookmarks})

    @app.post("/api/user/read-later")
    def read_later_add():
        data = request.get_json(silent=True) or {}
        with session_scope() as session:
            bookmark, created = add_bookmark(
                session,
                user_id=data.get("user_id"),
                article_id=data.get("article_id"),
                title=data.get("title"),
                url=data.get("url"),
                sector=data.get("sector"),
                source_system=data.get("source_system"),
            )
            body = bookmark.to_dict()
        return jsonify({"bookmark": body}), 201 if created else 200

    @app.delete("/api/user/read-later")
    def read_later_remove():
        data = request.get_json(silent=True) or {}
        with session_scope() as session:
            remove_bookmark(session, data.get("user_id"), data.get("article_id"))
        return jsonify({"message": "Bookmark removed"})

    @app.get("/api/proxy-image")
    def proxy_image():
        try:
            image = image_proxy.fetch(request.args.get("url"))
        except UpstreamError as exc:
            return jsonify({"error": "Failed to fetch image", "details": str(exc)}), 502
        response = Response(image.content, content_type=image.content_type)
        response.headers["Cache-Control"] = CACHE_CONTROL
        return response

    return app


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_positive_int(
    raw: str | None,
    *,
    default: int,
    minimum: int,
    maximum: int | None = None,
) -> int:
    if raw is None or raw == "":
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            value = default
    if value < minimum:
        value = minimum
    if maximum is not None and value > maximum:
        value = maximum
    return value


__all__ = ["create_app"]
