# noonsync/api/server.py

"""HTTP surface for the sync handlers.

``GET /api/products`` answers with whatever the configured handler
produced: status, JSON body and cache-control hint are passed through
unchanged so that clients can detect failures by status or by an
``error`` key.
"""

import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from noonsync.services.sync_handlers import handle_sync

logger = logging.getLogger("noonsync.api")

app = FastAPI(
    title="noonsync",
    description="Noon storefront catalog sync endpoint",
    version="0.1.0",
)


@app.get("/api/products")
def get_products() -> JSONResponse:
    """Run one sync against the configured source."""
    response = handle_sync()
    if response.status_code != 200:
        logger.warning("Sync endpoint answering HTTP %d", response.status_code)
    headers = {
        key: value
        for key, value in response.headers.items()
        if key.lower() != "content-type"
    }
    return JSONResponse(
        content=response.body,
        status_code=response.status_code,
        headers=headers,
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
