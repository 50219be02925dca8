import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request

from ..config import configure_logging
from ..errors import ApiError
from ..gemini import ChatClient, build_chat_client
from ..handlers import install_error_handlers
from ..schemas import ChatRequest

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Without GEMINI_API_KEY this function refuses to start. The image
    # endpoints live in api/index.py and are unaffected.
    app.state.chat_client = build_chat_client()
    yield


app = FastAPI(lifespan=lifespan)
install_error_handlers(app, {"/api/ai/chat": "Missing message in request body"})


def get_chat_client(request: Request) -> ChatClient:
    return request.app.state.chat_client


@app.post("/api/ai/chat")
def chat(body: ChatRequest, chat_client: ChatClient = Depends(get_chat_client)):
    try:
        reply = chat_client.reply(body.message)
    except Exception as e:
        logger.exception("Error generating chat reply")
        raise ApiError("Failed to get a reply from AI.") from e
    return {"reply": reply}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8001)
