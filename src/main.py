"""
Production FastAPI Application

Run with: granian src.main:app --interface asgi --host 0.0.0.0 --port 8100
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Ticketing Service] Starting up...')

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticketing Service] Dependency injection wired')

    # Create the engine for this event loop; connections are opened lazily
    get_engine()
    Logger.base.info('🗄️  [Ticketing Service] Database engine ready')

    Logger.base.info('✅ [Ticketing Service] Ready to serve requests')

    yield

    Logger.base.info('🛑 [Ticketing Service] Shutting down...')

    await dispose_engine()
    Logger.base.info('🗄️  [Ticketing Service] Database engine disposed')

    container.unwire()

    Logger.base.info('👋 [Ticketing Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
