from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
from openai import OpenAIError
from pydantic import ValidationError
import json
import logging
from typing import List, Optional

from ..core.config import get_settings
from ..core.state_machine import Intent, StateMachine
from ..core.timer_manager import TimerManager
from ..models.recipe import RecipeRequest, Step, Timer
from ..services.openai_client import OpenAIChatClient
from ..services.prompts import build_steps_messages
from ..services.recipe_parser import ParserSession
from .deps import provide_chat_client

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")

NAVIGATION = {intent.value: intent for intent in Intent}


async def _send(ws: WebSocket, payload: dict):
    if ws.application_state == WebSocketState.CONNECTED:
        await ws.send_json(payload)
    else:
        log.warning(f"❌ WebSocket not connected, {payload.get('type')} message dropped")


async def _error(ws: WebSocket, message: str):
    await _send(ws, {"type": "error", "message": message})


async def stream_steps(ws: WebSocket, client: OpenAIChatClient, request: RecipeRequest) -> List[Step]:
    """Relay the model output through a parser session, sending each step as it completes."""
    session = ParserSession()

    async def send_steps(steps: List[Step]):
        first = len(session.steps) - len(steps)
        for offset, step in enumerate(steps):
            await _send(ws, {"type": "step", "index": first + offset, "step": step.model_dump()})

    deltas = await client.stream_text(build_steps_messages(request), get_settings().steps_temperature)
    async for delta in deltas:
        await send_steps(session.ingest(delta).steps)
    await send_steps(session.flush())

    await _send(ws, {"type": "done", "count": len(session.steps)})
    log.info(f"✅ Streamed {len(session.steps)} steps for {request.dish!r}")
    return session.steps


async def handle_command(ws: WebSocket, message: dict, sm: StateMachine, timers: TimerManager):
    kind = message.get("type")

    if kind in NAVIGATION:
        index = message.get("index")
        if index is not None and not isinstance(index, int):
            await _error(ws, "index must be an integer")
            return
        await sm.handle(NAVIGATION[kind], index)

    elif kind == "start_timer":
        step = sm.current()
        seconds = message.get("seconds")
        if seconds is None and step is not None:
            seconds = step.time
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
            await _error(ws, "No timer for this step")
            return
        timer = timers.start(sm.idx, seconds, label=f"Step {sm.idx}")
        if timer is None:
            await _error(ws, f"Invalid timer duration: {seconds}")
            return
        await _send(ws, {"type": "timer_started", "index": sm.idx, "seconds": seconds})

    elif kind == "stop_timer":
        stopped = timers.stop(sm.idx)
        await _send(ws, {"type": "timer_stopped", "index": sm.idx, "stopped": stopped})

    elif kind == "add_minute":
        if timers.extend(sm.idx, 60) is None:
            await _error(ws, "No running timer for this step")
            return
        await _send(ws, {"type": "timer_extended", "index": sm.idx, "remaining": round(timers.remaining(sm.idx))})

    else:
        log.warning(f"Unknown command: {kind!r}")
        await _error(ws, f"Unknown command: {kind}")


@router.websocket("/ws")
async def cooking_session(ws: WebSocket, client: Optional[OpenAIChatClient] = Depends(provide_chat_client)):
    log.info("🔗 New WebSocket connection attempt")
    await ws.accept()
    log.info("✅ WebSocket connection accepted")

    if client is None:
        log.error("❌ OpenAI API key not configured")
        await _error(ws, "OpenAI API key not configured. Please set OPENAI_API_KEY in your .env file.")
        await ws.close()
        return

    try:
        # Client must send the recipe request first
        raw_request = await ws.receive_text()
        try:
            request = RecipeRequest.model_validate_json(raw_request)
        except ValidationError as e:
            log.warning(f"⚠️ Invalid recipe request: {e.error_count()} errors")
            await _error(ws, f"Invalid recipe request: {e}")
            await ws.close()
            return

        try:
            steps = await stream_steps(ws, client, request)
        except OpenAIError as e:
            log.error(f"💥 OpenAI stream error: {e}")
            await _error(ws, f"OpenAI request failed: {e}")
            await ws.close()
            return

        async def announce(index: int, step: Step):
            await _send(ws, {"type": "current", "index": index, "step": step.model_dump()})

        async def timer_done(timer: Timer):
            await _send(ws, {"type": "timer_done", "index": timer.step_index, "label": timer.label})

        sm = StateMachine(steps, announce)
        timers = TimerManager(timer_done)
        try:
            while True:
                text = await ws.receive_text()
                try:
                    message = json.loads(text)
                except json.JSONDecodeError:
                    await _error(ws, "Commands must be JSON objects")
                    continue
                if not isinstance(message, dict):
                    await _error(ws, "Commands must be JSON objects")
                    continue
                await handle_command(ws, message, sm, timers)
        finally:
            await timers.cancel_all()
            log.info("🛑 Timers cancelled")

    except WebSocketDisconnect:
        log.info("👋 Client disconnected")
