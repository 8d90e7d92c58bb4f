import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes.api_key import router as api_key_router
from src.api.routes.summarize import router as summarize_router
from src.api.routes.threads import router as threads_router
from src.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Chat Thread Intelligence API",
    description="LLM-powered topic and thread analysis for exported group chats",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"https://.*\.vercel\.app|http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(threads_router)
app.include_router(summarize_router)
app.include_router(api_key_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
