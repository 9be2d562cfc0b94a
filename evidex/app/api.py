from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from evidex.core.config import get_settings
from evidex.runtime.viewer_registry import ViewerRegistry
from evidex.web.routes import build_viewer_router


settings = get_settings()
registry = ViewerRegistry(settings)


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        yield
    finally:
        await registry.shutdown()


app = FastAPI(title="evidex", version="0.1.0", lifespan=lifespan)
app.include_router(build_viewer_router(settings=settings, registry=registry))


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
