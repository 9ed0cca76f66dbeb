import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .command_queue import CommandQueues
from .config import Settings
from .mqtt import MqttBus
from .persistence import JsonCatalogGateway
from .usecases.inventory import InventoryStore

from .routers.health import router as health_router
from .routers.medicines import router as medicines_router
from .routers.esp import router as esp_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    queues = CommandQueues()
    store = InventoryStore(JsonCatalogGateway(settings.catalog_path), queues)
    count = store.load()
    logger.info("[STORE] ready with %d medicines", count)

    mqtt = MqttBus(settings)
    queues.add_listener(mqtt.announce)
    await asyncio.to_thread(mqtt.start)

    app.state.store = store
    app.state.mqtt = mqtt
    try:
        yield
    finally:
        mqtt.stop()


async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ())[1:]) or "body"
        parts.append(f"{where}: {err.get('msg')}")
    return JSONResponse({"error": "; ".join(parts) or "Invalid request."}, status_code=400)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(title="Medvend Dispenser API", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    # All routers mounted here
    app.include_router(health_router, prefix="/api")
    app.include_router(medicines_router, prefix="/api")
    app.include_router(esp_router, prefix="/api")
    return app


def run() -> None:
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
