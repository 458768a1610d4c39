"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from ddtrace import patch_all
from fastapi import FastAPI

from stenopro.dependencies import init_infrastructure
from stenopro.routes import (
    glossary_router,
    prompts_router,
    templates_router,
    transcriptions_router,
)

patch_all()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_infrastructure()
    yield


app = FastAPI(title="StenoPro Transcription API", lifespan=lifespan)
app.include_router(transcriptions_router)
app.include_router(glossary_router)
app.include_router(prompts_router)
app.include_router(templates_router)
