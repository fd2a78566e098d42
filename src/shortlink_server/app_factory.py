"""FastAPI application factory for the standalone server."""

import json
from typing import Any, Dict, Optional

from aws_lambda_powertools import Logger
from fastapi import Depends, FastAPI, Request
from fastapi.responses import Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlink_commons.dispatcher import RequestDispatcher
from shortlink_commons.http_utils import SERVICE_NAME, create_error_response
from shortlink_commons.store import LockedInMemoryStore, MappingStore

logger = Logger(service=SERVICE_NAME)


def to_response(proxy_response: Dict[str, Any]) -> Response:
    """Convert an API Gateway proxy response dict into a Starlette response."""
    return Response(
        content=proxy_response.get('body', ''),
        status_code=proxy_response['statusCode'],
        headers=proxy_response.get('headers') or {},
    )


async def read_body(request: Request) -> Optional[str]:
    """Request body as text, or None when it is not valid UTF-8."""
    raw_body = await request.body()
    try:
        return raw_body.decode('utf-8')
    except UnicodeDecodeError:
        return None


def create_app(
    store: Optional[MappingStore] = None,
    base_url: Optional[str] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Mapping store (defaults to a fresh locked in-memory store)
        base_url: Prefix for returned short URLs; the request's own base
            URL is used when not given

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="Maps long URLs to short codes and redirects",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.store = store if store is not None else LockedInMemoryStore()
    app.state.base_url = base_url

    def get_dispatcher(request: Request) -> RequestDispatcher:
        return RequestDispatcher(
            store=request.app.state.store,
            base_url=request.app.state.base_url or str(request.base_url),
        )

    # Both routes are sync so store access always runs on the threadpool
    @app.post("/api/shorten")
    def shorten_url(request: Request, body: Optional[str] = Depends(read_body)):
        """Create a short code for the URL in the request body."""
        return to_response(get_dispatcher(request).shorten(body))

    @app.get("/{code}")
    def redirect_url(request: Request, code: str):
        """Redirect to the URL stored for ``code``."""
        return to_response(get_dispatcher(request).resolve(code))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Routing errors (404 on unknown paths, 405 on known ones) share the JSON error body
        message = exc.detail if isinstance(exc.detail, str) else json.dumps(exc.detail)
        response = to_response(create_error_response(
            status_code=exc.status_code,
            error_message=message,
            logger=logger,
        ))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    return app
