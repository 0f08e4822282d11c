"""
HTTP transport for the execution gateway (FastAPI).
"""

from __future__ import annotations
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from spot_scanner.execution.gateway import ExecutionGateway


def create_app(gateway: ExecutionGateway) -> FastAPI:
    app = FastAPI(title="Spot Scanner Executor")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # Sync handler: FastAPI runs it in its threadpool, so different symbols execute in parallel.
    @app.get("/{token}")
    def execute(
        token: str,
        action: Optional[str] = Query(None),
        symbol: Optional[str] = Query(None),
    ):
        res = gateway.handle(token, action, symbol)
        if isinstance(res.body, str):
            return PlainTextResponse(res.body, status_code=res.status_code)
        return JSONResponse(res.body, status_code=res.status_code)

    return app
