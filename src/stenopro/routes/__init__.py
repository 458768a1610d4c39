from .glossary import router as glossary_router
from .prompts import prompts_router, templates_router
from .transcriptions import router as transcriptions_router

__all__ = [
    "glossary_router",
    "prompts_router",
    "templates_router",
    "transcriptions_router",
]
