from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from restenvelope.exceptions import APIError, ErrorField
from restenvelope.middleware import RequestIDMiddleware
from restenvelope.responses import register_exception_handlers


@pytest.fixture
def app() -> FastAPI:
    """App with one route per kind of failure the handlers must render."""
    app = FastAPI()
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)

    @app.get("/items")
    async def list_items(limit: int) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/classified")
    async def classified() -> None:
        raise APIError(
            422,
            "validation failed",
            ErrorField("email", "required"),
            ErrorField("password", "too short"),
        )

    @app.get("/wrapped")
    async def wrapped() -> None:
        try:
            raise APIError(404, "User not found")
        except APIError as exc:
            raise RuntimeError("lookup failed") from exc

    @app.get("/crash")
    async def crash() -> None:
        raise RuntimeError("database connection failed")

    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the test app.

    raise_app_exceptions=False because Starlette re-raises unhandled
    exceptions after the 500 response has been sent.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client
