import pytest
from fastapi.testclient import TestClient

from backend.app.api.deps import provide_chat_client
from backend.app.main import app

from fakes import FakeChatClient

RECIPE_TEXT = (
    "Ingredients: 2 cups rice, 4 cups water, salt\n"
    "1. Rinse the rice for 2 minutes.\n"
    "2. Boil the water, about 10 min.\n"
    "3) Add the rice and simmer covered for 1 hour\n"
    "4. Rest 45 సెకన్లు then serve.\n"
)


def chunked(text, size):
    return [text[i:i + size] for i in range(0, len(text), size)]


@pytest.fixture
def recipe_text():
    return RECIPE_TEXT


@pytest.fixture
def fake_llm():
    return FakeChatClient(deltas=chunked(RECIPE_TEXT, 7))


@pytest.fixture
def client(fake_llm):
    app.dependency_overrides[provide_chat_client] = lambda: fake_llm
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def recipe_request():
    return {
        "dish": "Jeera rice",
        "people": 2,
        "language": "English",
        "extraNotes": "",
        "userPreferences": {"dietType": "veg"},
    }
