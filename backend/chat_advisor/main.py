"""
FastAPI application: health check and the chat WebSocket.

Each WebSocket connection gets its own ConversationController; the
completion client is shared for the life of the process.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated, Callable, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import Field, TypeAdapter, ValidationError

from chat_advisor.config import settings
from chat_advisor.llm.completion_client import CompletionClient
from chat_advisor.models import ClientMessage, PingMessage, UserMessage
from chat_advisor.orchestration.conversation_controller import (
    ConversationController,
    SubmitOutcome,
)
from chat_advisor.websocket import WebSocketRenderer, connection_manager

logging.basicConfig(level=settings.log_level, format="[%(asctime)s] %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger(__name__)

client_message_adapter = TypeAdapter(Annotated[ClientMessage, Field(discriminator="type")])


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = CompletionClient(
        settings.worker_endpoint,
        placeholder_token=settings.worker_url_placeholder,
    )
    if not client.is_configured:
        logger.warning("Worker URL is not configured; chat requests will fail until WORKER_URL is set")
    else:
        logger.info(f"Using worker endpoint: {client.endpoint}")
    app.state.completion_client = client
    yield
    await client.close()


app = FastAPI(title="L'Oréal Smart Product Advisor", version="1.0.0", lifespan=lifespan)

origins = ["*"] if settings.is_development else [settings.frontend_url]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    client = getattr(app.state, "completion_client", None)
    return {
        "status": "ok",
        "endpoint_configured": bool(client and client.is_configured),
    }


async def _submit(session_id: str, controller: ConversationController, text: str) -> None:
    outcome = await controller.submit(text)
    if outcome == SubmitOutcome.REJECTED_BUSY:
        await connection_manager.send_error(
            session_id,
            "REQUEST_PENDING",
            "Please wait for the current reply before sending another message.",
            recoverable=True,
        )


def _submit_done(session_id: str, tasks: Set[asyncio.Task]) -> Callable[[asyncio.Task], None]:
    """Build a done callback that forgets the task and logs its failure."""
    def on_done(task: asyncio.Task) -> None:
        tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Submit task failed on session {session_id}: {error}", exc_info=error)
    return on_done


@app.websocket("/ws")
async def chat_websocket(websocket: WebSocket):
    session_id = await connection_manager.connect(websocket)
    renderer = WebSocketRenderer(connection_manager, session_id)
    controller = ConversationController(
        renderer,
        client=websocket.app.state.completion_client,
    )
    controller.state_machine.register_on_transition(renderer.on_state_change)
    await controller.greet()

    tasks: Set[asyncio.Task] = set()
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))

            raw = frame.get("text")
            if raw is None:
                logger.warning(f"Binary frame on session {session_id} ignored")
                await connection_manager.send_error(
                    session_id, "INVALID_MESSAGE", "Message could not be understood.", recoverable=True
                )
                continue

            try:
                message = client_message_adapter.validate_json(raw)
            except ValidationError as e:
                logger.warning(f"Invalid client message on session {session_id}: {e.error_count()} errors")
                await connection_manager.send_error(
                    session_id, "INVALID_MESSAGE", "Message could not be understood.", recoverable=True
                )
                continue

            if isinstance(message, PingMessage):
                await connection_manager.send_pong(session_id)
            elif isinstance(message, UserMessage):
                task = asyncio.create_task(_submit(session_id, controller, message.data.text))
                tasks.add(task)
                task.add_done_callback(_submit_done(session_id, tasks))
    except WebSocketDisconnect:
        logger.info(f"Client closed session {session_id}")
    finally:
        pending = list(tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        await connection_manager.disconnect(session_id)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("chat_advisor.main:app", host=settings.host, port=settings.port, reload=settings.is_development)
