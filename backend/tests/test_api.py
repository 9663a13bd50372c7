import asyncio

from openai import OpenAIError

from backend.app.api.deps import provide_chat_client
from backend.app.main import app
from backend.app.services.recipe_parser import RecipeParser
from backend.app.services.sse import SSEDecoder, consume_step_stream

from fakes import FakeChatClient


async def agen(chunks):
    for chunk in chunks:
        yield chunk


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_steps_are_relayed_as_events(client, fake_llm, recipe_request, recipe_text):
    response = client.post("/api/recipe/steps", json=recipe_request)

    assert response.status_code == 200
    assert "text/event-stream" in response.headers["content-type"]
    assert response.text.endswith("data: [DONE]\n\n")

    decoder = SSEDecoder()
    assert "".join(decoder.feed(response.content)) == recipe_text
    assert decoder.done

    steps = asyncio.run(consume_step_stream(agen([response.content])))
    assert steps == RecipeParser.parse_steps(recipe_text)
    assert [s.time for s in steps] == [None, 120, 600, 3600, 45]

    messages = fake_llm.calls[-1]
    assert "Jeera rice" in messages[1]["content"]
    assert "vegetarian" in messages[1]["content"]


def test_nutrition_is_relayed(client, fake_llm, recipe_request):
    fake_llm.deltas = ["Calories: 350 kcal\n", "Protein: 8 g"]
    response = client.post("/api/recipe/nutrition", json=recipe_request)

    assert response.status_code == 200
    assert "".join(SSEDecoder().feed(response.content)) == "Calories: 350 kcal\nProtein: 8 g"
    assert "nutritional breakdown" in fake_llm.calls[-1][1]["content"]


def test_missing_api_key(client, recipe_request):
    app.dependency_overrides[provide_chat_client] = lambda: None
    response = client.post("/api/recipe/steps", json=recipe_request)
    assert response.status_code == 503
    assert "OPENAI_API_KEY" in response.json()["detail"]


def test_openai_failure_before_stream(client, recipe_request):
    app.dependency_overrides[provide_chat_client] = lambda: FakeChatClient(error=OpenAIError("boom"))
    response = client.post("/api/recipe/steps", json=recipe_request)
    assert response.status_code == 502
    assert "boom" in response.json()["detail"]


def test_openai_failure_mid_stream(client, recipe_request):
    fake = FakeChatClient(deltas=["1. Boil", " water\n", "2. Add"], error=OpenAIError("reset"), fail_after=2)
    app.dependency_overrides[provide_chat_client] = lambda: fake
    response = client.post("/api/recipe/steps", json=recipe_request)

    assert response.status_code == 200
    assert 'data: {"error": "reset"}' in response.text
    assert response.text.endswith("data: [DONE]\n\n")
    assert "".join(SSEDecoder().feed(response.content)) == "1. Boil water\n"


def test_invalid_request_body(client):
    response = client.post("/api/recipe/steps", json={"people": 2})
    assert response.status_code == 422


def test_suggestions_are_padded_and_clamped(client, fake_llm):
    fake_llm.json_reply = {"recipes": ["Upma", "  ", "Poha"]}
    response = client.post("/api/recipe/suggest", json={"ingredients": ["rava"], "count": 3})
    assert response.status_code == 200
    assert response.json() == {"recipes": ["Upma", "Poha", "Recipe Idea 3"]}

    fake_llm.json_reply = {"recipes": [f"Dish {i}" for i in range(9)]}
    response = client.post("/api/recipe/suggest", json={"ingredients": ["rava"], "count": 10})
    assert len(response.json()["recipes"]) == 5


def test_suggestions_with_bad_reply(client):
    app.dependency_overrides[provide_chat_client] = lambda: FakeChatClient(error=ValueError("Model returned invalid JSON"))
    response = client.post("/api/recipe/suggest", json={"ingredients": ["rava"]})
    assert response.status_code == 502


def test_parse_endpoint(client, recipe_text):
    response = client.post("/api/recipe/parse", json={"text": recipe_text, "title": "Jeera rice"})
    assert response.status_code == 200

    body = response.json()
    assert body["title"] == "Jeera rice"
    assert body["ingredients"] == "Ingredients: 2 cups rice, 4 cups water, salt"
    assert [s["time"] for s in body["steps"]] == [None, 120, 600, 3600, 45]
    assert body["steps"][4]["text"] == "4. Rest 45 సెకన్లు then serve."
