import logging
from typing import AsyncIterator, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from openai import OpenAIError

from ..core.config import get_settings
from ..models.recipe import ParseRequest, Recipe, RecipeRequest, SuggestRequest
from ..services.openai_client import OpenAIChatClient
from ..services.prompts import build_nutrition_messages, build_steps_messages, build_suggest_messages
from ..services.recipe_parser import RecipeParser
from ..services.sse import encode_done, encode_event
from .deps import get_llm_client

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api")

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


async def _open_stream(client: OpenAIChatClient, messages: List[Dict[str, str]], temperature: float) -> AsyncIterator[str]:
    try:
        return await client.stream_text(messages, temperature)
    except OpenAIError as e:
        log.error(f"❌ OpenAI request failed: {e}")
        raise HTTPException(status_code=502, detail=f"OpenAI request failed: {e}")


async def _relay(deltas: AsyncIterator[str]) -> AsyncIterator[str]:
    try:
        async for delta in deltas:
            yield encode_event({"content": delta})
    except OpenAIError as e:
        # Headers are already sent; report in-band and still terminate the stream.
        log.error(f"💥 Stream interrupted: {e}")
        yield encode_event({"error": str(e)})
    yield encode_done()


@router.post("/recipe/steps")
async def recipe_steps(body: RecipeRequest, client: OpenAIChatClient = Depends(get_llm_client)):
    log.info(f"🍳 Steps requested: {body.dish!r} for {body.people} in {body.language}")
    deltas = await _open_stream(client, build_steps_messages(body), get_settings().steps_temperature)
    return StreamingResponse(_relay(deltas), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/recipe/nutrition")
async def recipe_nutrition(body: RecipeRequest, client: OpenAIChatClient = Depends(get_llm_client)):
    log.info(f"🥗 Nutrition requested: {body.dish!r}")
    deltas = await _open_stream(client, build_nutrition_messages(body), get_settings().nutrition_temperature)
    return StreamingResponse(_relay(deltas), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/recipe/suggest")
async def recipe_suggest(body: SuggestRequest, client: OpenAIChatClient = Depends(get_llm_client)):
    settings = get_settings()
    count = min(max(body.count, 1), settings.max_suggestions)
    log.info(f"💡 Suggestions requested: {count} from {len(body.ingredients)} ingredients")

    try:
        parsed = await client.complete_json(build_suggest_messages(body, count), settings.suggest_temperature)
    except (OpenAIError, ValueError) as e:
        log.error(f"❌ Suggestion request failed: {e}")
        raise HTTPException(status_code=502, detail=f"Suggestion request failed: {e}")

    recipes = parsed.get("recipes")
    if not isinstance(recipes, list):
        recipes = []
    recipes = [str(r).strip() for r in recipes if str(r).strip()]
    while len(recipes) < count:
        recipes.append(f"Recipe Idea {len(recipes) + 1}")

    return {"recipes": recipes[:count]}


@router.post("/recipe/parse", response_model=Recipe)
async def recipe_parse(body: ParseRequest):
    recipe = RecipeParser.parse(body.text, title=body.title)
    log.info(f"✅ Recipe parsed: {len(recipe.steps)} steps")
    return recipe
