from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Scalar columns a partial update may touch, in the order they are applied.
MOOD_UPDATE_FIELDS: tuple[str, ...] = (
    "rating",
    "stress_level",
    "anxiety_level",
    "energy_level",
    "title",
    "description",
    "recorded_at",
)


class MoodComponentIn(BaseModel):
    emotion: str = Field(..., min_length=1, max_length=20)
    intensity: int = Field(..., ge=1, le=10)


class MoodCreate(BaseModel):
    user_id: int
    stress_level: int = Field(..., ge=1, le=10)
    anxiety_level: int = Field(..., ge=1, le=10)
    energy_level: int = Field(..., ge=1, le=10)
    recorded_at: datetime
    rating: int | None = Field(default=None, ge=1, le=10)
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=500)
    mood_components: list[MoodComponentIn] | None = None


class MoodUpdate(BaseModel):
    """Partial update; only fields in ``model_fields_set`` are applied.

    ``mood_components`` being set at all (even to an empty list) replaces the
    stored components.
    """

    rating: int | None = Field(default=None, ge=1, le=10)
    stress_level: int | None = Field(default=None, ge=1, le=10)
    anxiety_level: int | None = Field(default=None, ge=1, le=10)
    energy_level: int | None = Field(default=None, ge=1, le=10)
    title: str | None = Field(default=None, max_length=500)
    description: str | None = Field(default=None, max_length=500)
    recorded_at: datetime | None = None
    mood_components: list[MoodComponentIn] | None = None

    def present_fields(self) -> list[str]:
        return [name for name in MOOD_UPDATE_FIELDS if name in self.model_fields_set]

    @property
    def replaces_components(self) -> bool:
        return "mood_components" in self.model_fields_set


class MoodComponentModel(BaseModel):
    id: int
    mood_id: int
    emotion: str
    intensity: int

    model_config = ConfigDict(from_attributes=True)


class EmotionStatsModel(BaseModel):
    dominant: str | None
    average: float
    breakdown: dict[str, int | float]


class MoodEntryModel(BaseModel):
    id: int
    user_id: int
    rating: int | None
    stress_level: int
    anxiety_level: int
    energy_level: int
    title: str | None
    description: str | None
    recorded_at: datetime
    created_at: datetime | None
    updated_at: datetime | None
    mood_components: list[MoodComponentModel] = Field(default_factory=list)
    emotion_stats: EmotionStatsModel | None = None


class MoodDetail(MoodEntryModel):
    first_name: str | None = None
    last_name: str | None = None


class PaginationModel(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MoodListResponse(BaseModel):
    moods: list[MoodEntryModel]
    pagination: PaginationModel


class OverallStats(BaseModel):
    total_entries: int
    avg_rating: float
    avg_stress: float
    avg_anxiety: float
    avg_energy: float
    min_rating: int | None
    max_rating: int | None
    min_stress: int | None
    max_stress: int | None
    min_anxiety: int | None
    max_anxiety: int | None
    min_energy: int | None
    max_energy: int | None


class EmotionFrequency(BaseModel):
    emotion: str
    frequency: int
    avg_intensity: float


class DayOfWeekTrend(BaseModel):
    day_of_week: str
    day_number: int = Field(..., ge=0, le=6)
    entries: int
    avg_rating: float
    avg_stress: float
    avg_anxiety: float
    avg_energy: float


class MoodTrends(BaseModel):
    by_day_of_week: list[DayOfWeekTrend]


class DateRange(BaseModel):
    start: str | None = None
    end: str | None = None


class MoodStatsResponse(BaseModel):
    overall: OverallStats
    emotions: list[EmotionFrequency]
    trends: MoodTrends
    date_range: DateRange
