"""Demo application wiring envelopes into FastAPI.

Run with ``uvicorn restenvelope.main:app``.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from restenvelope.logging import configure_logging
from restenvelope.middleware import RequestIDMiddleware
from restenvelope.responses import envelope_response, register_exception_handlers
from restenvelope.schemas.envelope import Envelope

configure_logging()

app = FastAPI()
app.add_middleware(RequestIDMiddleware)
register_exception_handlers(app)


@app.get("/health")
async def health() -> JSONResponse:
    """Liveness probe answering {"code": 200, "data": {"status": "ok"}}."""
    return envelope_response(Envelope[dict[str, str]]().set_code(200).set_data({"status": "ok"}))
