from __future__ import annotations

from datetime import timedelta
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, conint, constr


class Step(BaseModel):
    text: str
    time: Optional[conint(ge=0)] = None


class StreamResult(BaseModel):
    """Steps completed by one ingest call and the text still buffered."""

    steps: List[Step] = []
    remaining: str = ""


class Timer(BaseModel):
    label: str
    step_index: int
    duration: timedelta
    remaining_sec: conint(ge=0) = 0


class Recipe(BaseModel):
    title: str
    steps: List[Step]
    ingredients: Optional[str] = None

    @property
    def timers(self) -> List[Step]:
        return [step for step in self.steps if step.time]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserPreferences(_CamelModel):
    diet_type: Optional[Literal["veg", "vegan", "nonveg"]] = Field(None, alias="dietType")
    allergies: List[str] = []
    dislikes: List[str] = []
    skill_level: Optional[Literal["beginner", "intermediate", "pro"]] = Field(None, alias="skillLevel")


class RecipeRequest(_CamelModel):
    dish: constr(strip_whitespace=True, min_length=1)
    people: conint(ge=1) = 2
    extra_notes: str = Field("", alias="extraNotes")
    language: str = "English"
    user_preferences: UserPreferences = Field(default_factory=UserPreferences, alias="userPreferences")


class SuggestRequest(_CamelModel):
    ingredients: List[str] = []
    count: int = 5
    cuisine: Optional[str] = None
    language: str = "English"
    user_preferences: UserPreferences = Field(default_factory=UserPreferences, alias="userPreferences")


class ParseRequest(BaseModel):
    text: str
    title: str = "Untitled"
