"""Fake Live bridge application.

Run with::

    uvicorn api.main:app --port 9001
"""

import os
import time

from fastapi import FastAPI
from fastapi.responses import Response

from api.fake_live import FakeLiveSet
from api.fake_live import router as fake_live_router
from infrastructure.metrics import get_metrics_response


def create_app(live_set: FakeLiveSet | None = None) -> FastAPI:
    """Build the app around ``live_set`` (a fresh demo set by default)."""
    application = FastAPI(title="Fake Live Bridge")
    application.state.live_set = live_set if live_set is not None else FakeLiveSet()
    application.include_router(fake_live_router)

    @application.get("/health")
    def health() -> dict[str, object]:
        """Return a simple liveness check."""
        return {
            "status": "ok",
            "port": int(os.environ.get("LIVE_BRIDGE_PORT", "9001")),
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        }

    @application.get("/metrics")
    def metrics() -> Response:
        """Prometheus metrics endpoint.

        Returns metrics in Prometheus text exposition format.
        """
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    return application


app = create_app()
