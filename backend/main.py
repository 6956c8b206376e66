"""Entry point for the JJ Viewer FastAPI application."""

import logging
import shutil

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as api_router
from utils.settings import get_host, get_jj_binary, get_log_level, get_port

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s %(levelname)s [%(filename)s:%(lineno)d] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# A missing jj is reported per request as ToolNotFound, so only warn here.
jj_binary = get_jj_binary()
if shutil.which(jj_binary) is None:
    logger.warning(
        "jj executable '%s' not found. Install Jujutsu or set JJ_BINARY to its path.",
        jj_binary,
    )

app = FastAPI(title="JJ Viewer Backend", version="0.1.0")

# The desktop frontend runs on the same machine from its own origin.
origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Error-Kind"],
)

app.include_router(api_router)


@app.get("/")
async def root() -> dict:
    """
    Simple heartbeat endpoint to confirm the API is online.

    Returns:
        dict: App metadata payload.
    """
    return {"status": "ok", "app": "JJ Viewer Backend"}


def run() -> None:
    """Serve the API with uvicorn on JJ_VIEWER_HOST:JJ_VIEWER_PORT."""
    import uvicorn

    uvicorn.run(
        app,
        host=get_host(),
        port=get_port(),
        log_level=logging.getLevelName(get_log_level()).lower(),
    )


if __name__ == "__main__":
    run()
