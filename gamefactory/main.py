from fastapi import FastAPI
import logging

from gamefactory.api.deps import init_engine, shutdown_engine
from gamefactory.api.routes import router
from gamefactory.config import load_config

app = FastAPI(title="game-factory", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    engine = init_engine(config=load_config())
    engine.store.start()
    logger.info("session sweep started (ttl=%s)", engine.store.ttl)


@app.on_event("shutdown")
async def _shutdown() -> None:
    shutdown_engine()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "game-factory", "version": "0.1.0"}
