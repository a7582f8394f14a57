# sitewright/main.py
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from sitewright.core.config import ModelConfig, Settings
from sitewright.routes.chat import router as chat_router
from sitewright.routes.projects import router as projects_router
from sitewright.services.formatter import SourceFormatter
from sitewright.services.notifier import ProjectNotifier
from sitewright.services.ollama_client import OllamaClient
from sitewright.services.projects import InMemoryProjectStore


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[InMemoryProjectStore] = None,
    client_factory: Optional[Callable[[ModelConfig], object]] = None,
    formatter: Optional[SourceFormatter] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.executor.shutdown(wait=False)
        app.state.notifier.shutdown(wait=False)

    app = FastAPI(title="sitewright", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store or InMemoryProjectStore()
    app.state.client_factory = client_factory or OllamaClient
    app.state.formatter = formatter or SourceFormatter(settings.formatter)
    app.state.notifier = ProjectNotifier()
    app.state.executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="sitewright-run")
    app.include_router(chat_router)
    app.include_router(projects_router)
    return app


app = create_app()
