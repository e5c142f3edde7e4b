"""HTTP endpoint serving meeting preview images."""

from __future__ import annotations

import argparse
import logging
import os

from dotenv import load_dotenv
from flask import Flask, request
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response

from domain_types import MissingIdentifier, RenderRequest
from fonts import LazyFontResources
from meetings_api import MeetingsApiClient
from og_service import CACHE_CONTROL, OgImageService
from response_cache import ResponseCache
from settings import Settings

logger = logging.getLogger(__name__)

__all__ = ["create_app", "create_app_from_env", "run_web_app"]


def create_app(service: OgImageService) -> Flask:
    """Create the Flask app serving images through ``service``."""

    app = Flask(__name__)

    @app.route("/og/", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def og_image_missing_id() -> Response:
        return Response(
            "Missing id",
            status=400,
            mimetype="text/plain",
            headers={"Cache-Control": CACHE_CONTROL},
        )

    @app.route("/og/<path:entity_id>", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def og_image(entity_id: str) -> Response:
        try:
            render_request = RenderRequest.parse(
                entity_id,
                format_param=request.args.get("format"),
                type_param=request.args.get("type"),
            )
        except MissingIdentifier as exc:
            return Response(
                str(exc),
                status=400,
                mimetype="text/plain",
                headers={"Cache-Control": CACHE_CONTROL},
            )

        result = service.handle(
            render_request,
            if_none_match=request.headers.get("If-None-Match"),
        )
        response = Response(result.body, status=result.status)
        if result.content_type:
            response.headers["Content-Type"] = result.content_type
        for name, value in result.headers.items():
            response.headers[name] = value
        return response

    @app.errorhandler(Exception)
    # pyright: ignore[reportUnusedFunction]
    def unexpected_error(exc: Exception) -> Response:
        if isinstance(exc, HTTPException):
            return exc.get_response()
        logger.exception("Unhandled error while serving %s", request.path)
        return Response(
            "Internal server error",
            status=500,
            mimetype="text/plain",
            headers={"Cache-Control": CACHE_CONTROL},
        )

    return app


def build_service(settings: Settings) -> OgImageService:
    """Wire the API client, cache and fonts described by ``settings``."""

    return OgImageService(
        api=MeetingsApiClient(base_url=settings.api_url, timeout=settings.api_timeout),
        cache=ResponseCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
        ),
        fonts=LazyFontResources(settings.font_files),
        site_url=settings.site_url,
    )


def create_app_from_env() -> Flask:
    """Create the Flask app using MEETINGS_* / OG_* environment variables."""

    return create_app(build_service(Settings.from_env()))


def run_web_app(host: str, port: int) -> None:
    """Launch the development server."""

    app = create_app_from_env()
    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in {"1", "true", "yes", "on"}
        if use_reloader_env is not None
        else False
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the preview image server."""
    parser = argparse.ArgumentParser(description="Meeting preview image server")
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP to bind (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port to listen on (default: 4000).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run_web_app(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    load_dotenv()
    raise SystemExit(main())
