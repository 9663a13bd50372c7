"""
Chat messages sent to the model for recipe steps, nutrition and dish ideas.
"""

from typing import Dict, List

from ..models.recipe import RecipeRequest, SuggestRequest, UserPreferences

Message = Dict[str, str]

DIET_INSTRUCTIONS = {
    "veg": "Make this a completely vegetarian recipe with no meat, fish, or eggs.",
    "vegan": "Make this a completely vegan recipe with no animal products (no meat, fish, eggs, dairy, honey).",
    "nonveg": "You may include meat, fish, or other non-vegetarian ingredients as appropriate.",
}

SUGGEST_DIET_INSTRUCTIONS = {
    "veg": "Only suggest vegetarian dishes (no meat, fish, or eggs).",
    "vegan": "Only suggest vegan dishes (no animal products whatsoever).",
    "nonveg": "You may suggest both vegetarian and non-vegetarian dishes.",
}

SKILL_INSTRUCTIONS = {
    "beginner": "Keep the recipe simple with basic techniques and common ingredients.",
    "intermediate": "You may include moderate complexity techniques and ingredients.",
    "pro": "Feel free to use advanced techniques and specialized ingredients.",
}


def _preference_clauses(prefs: UserPreferences) -> List[str]:
    clauses = []
    if prefs.diet_type:
        clauses.append(DIET_INSTRUCTIONS[prefs.diet_type])
    if prefs.allergies:
        clauses.append(f"IMPORTANT: Avoid these allergens completely: {', '.join(prefs.allergies)}.")
    if prefs.dislikes:
        clauses.append(f"Avoid using these ingredients if possible: {', '.join(prefs.dislikes)}.")
    if prefs.skill_level:
        clauses.append(SKILL_INSTRUCTIONS[prefs.skill_level])
    return clauses


def build_steps_messages(request: RecipeRequest) -> List[Message]:
    parts = [f"Give me a clear, numbered, step-by-step recipe for {request.dish} for {request.people} people."]
    parts.append("Start with the list of ingredients, then the numbered steps.")
    parts.extend(_preference_clauses(request.user_preferences))
    if request.extra_notes.strip():
        parts.append(f"Additional notes: {request.extra_notes.strip()}.")
    parts.append(
        f"Respond only in {request.language}. No bold letters or special characters. "
        "Use one numbered step per line."
    )

    return [
        {
            "role": "system",
            "content": (
                "You are a multilingual professional chef assistant. Output only cooking steps, "
                f"numbered, in {request.language}. Always respect dietary restrictions and allergies."
            ),
        },
        {"role": "user", "content": " ".join(parts)},
    ]


def build_nutrition_messages(request: RecipeRequest) -> List[Message]:
    parts = [f"Give me an approximate nutritional breakdown (per serving) for {request.dish} for {request.people} people."]
    if request.user_preferences.diet_type:
        parts.append(f"This is a {request.user_preferences.diet_type} recipe.")
    if request.extra_notes.strip():
        parts.append(f"Additional notes: {request.extra_notes.strip()}.")
    parts.append(
        "Include approximate values for calories, protein, fat, and carbohydrates. "
        f"Respond only in {request.language}. No bold letters, just a clear list."
    )

    return [
        {
            "role": "system",
            "content": f"You are a multilingual professional chef assistant. Return nutrition facts in {request.language}.",
        },
        {"role": "user", "content": " ".join(parts)},
    ]


def build_suggest_messages(request: SuggestRequest, count: int) -> List[Message]:
    prefs = request.user_preferences
    system = [
        "You are ChefSpeak, a helpful culinary assistant.",
        f"Given a list of available ingredients, suggest {count} realistic dish ideas that the user can likely cook now.",
        "Prefer dishes using multiple provided ingredients and common Indian staples (oil, salt, basic spices).",
    ]
    if prefs.diet_type:
        system.append(SUGGEST_DIET_INSTRUCTIONS[prefs.diet_type])
    if prefs.allergies:
        system.append(f"NEVER suggest dishes containing these allergens: {', '.join(prefs.allergies)}.")
    system.append('Output strict JSON: {"recipes": ["Dish 1", "Dish 2"]}.')
    system.append(f"No extra text or keys. Use {request.language} for dish names.")

    user = []
    if request.cuisine:
        user.append(f"Target cuisine: {request.cuisine}.")
    user.append(f"Available ingredients: {', '.join(request.ingredients) or '(none listed)'}.")
    if prefs.dislikes:
        user.append(f"Try to avoid these ingredients: {', '.join(prefs.dislikes)}.")
    user.append(f"Return exactly {count} distinct dish names.")

    return [
        {"role": "system", "content": " ".join(system)},
        {"role": "user", "content": " ".join(user)},
    ]
