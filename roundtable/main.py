import logging

from fastapi import FastAPI

from roundtable.api.deps import shutdown_registry
from roundtable.api.routes import router

app = FastAPI(title="roundtable", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("shutdown")
async def _shutdown() -> None:
    shutdown_registry()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "roundtable", "version": "0.1.0"}
