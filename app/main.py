from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.capture import InvalidTweetUrlError, save_thread
from app.core.settings import Settings
from app.core.storage import (
    InvalidFilenameError,
    ThreadNotFoundError,
    get_store,
    init_store,
)
from app.providers.bird import BirdClient, BirdError, TweetNotFoundError

logger = logging.getLogger(__name__)

app = FastAPI(title="thread-pocket")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
)


class SaveRequest(BaseModel):
    url: str | None = None


@app.on_event("startup")
def _startup() -> None:
    init_store()


def get_bird_client() -> BirdClient:
    return BirdClient.from_settings(Settings.from_env())


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@app.get("/threads")
def list_threads():
    """List saved threads, newest first, with front-matter fields flattened."""
    try:
        threads = get_store().list_threads()
    except OSError as e:
        logger.exception("Failed to list threads")
        return _error(str(e), 500)
    return [t.to_dict() for t in threads]


@app.post("/save")
def save(req: SaveRequest):
    """Fetch a thread or article by URL and save it as Markdown.

    Returns:
        {success, filename, author, authorName, tweetCount}
    """
    if not req.url:
        return _error("URL required", 400)

    try:
        result = save_thread(req.url, client=get_bird_client(), store=get_store())
    except InvalidTweetUrlError as e:
        return _error(str(e), 400)
    except TweetNotFoundError:
        return _error("Tweet not found", 404)
    except (BirdError, OSError) as e:
        logger.error(f"Error saving thread: {e}")
        return _error(str(e), 500)
    except Exception as e:
        logger.exception(f"Unexpected error saving {req.url}")
        return _error(str(e), 500)

    return result.to_dict()


@app.delete("/threads/{filename}")
def delete_thread(filename: str):
    try:
        get_store().delete(filename)
    except InvalidFilenameError:
        return _error("Invalid filename", 400)
    except ThreadNotFoundError:
        return _error("File not found", 404)
    return {"success": True}


def run() -> None:
    """Serve the API with uvicorn using host/port from the environment."""
    s = Settings.from_env()
    logging.basicConfig(
        level=s.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Thread Pocket API running on port {s.port}")
    uvicorn.run(app, host=s.host, port=s.port, log_level=s.log_level.lower())


if __name__ == "__main__":
    run()
