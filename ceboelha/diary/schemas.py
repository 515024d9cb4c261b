# -*- coding: utf-8 -*-
"""Diary — request/response schemas.

Each request kind has a ``parse_*`` function returning ``(value, [])`` on
success or ``(None, violations)`` with one ``FieldViolation`` per broken
constraint. The FastAPI routes use the same models, so HTTP requests and
direct callers see identical rules.
"""

from __future__ import annotations

from typing import Annotated, Any, Generic, List, Literal, Optional, Tuple, Type, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import FieldViolation, violations_from_errors
from ..utils import DATE_PATTERN, TIME_PATTERN, is_valid_date_format
from .models import EntryType, MealData, MealType, SymptomData, SymptomType

DEFAULT_OVERVIEW_DAYS = 30
MAX_OVERVIEW_DAYS = 3650

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

DayStatus = Literal["great", "good", "okay", "bad", "terrible", "empty"]


def _calendar_date(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_date_format(value):
        raise ValueError("date must be a real calendar day (YYYY-MM-DD)")
    return value


CalendarDate = Annotated[str, Field(pattern=DATE_PATTERN), AfterValidator(_calendar_date)]


# ---- Request bodies ----


class NutritionSnapshotIn(BaseModel):
    calories: float
    carbs: float
    protein: float
    fat: float
    sugar: float
    fiber: float
    sodium: float


class FoodIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    food_id: int = Field(..., alias="foodId", description="Food id")
    food_name: str = Field(..., alias="foodName", min_length=1, description="Food name")
    portion: Optional[str] = Field(None, description="Portion description")
    quantity_g: Optional[float] = Field(None, ge=0, description="Quantity in grams")
    marked_as_bad: Optional[bool] = Field(None, alias="markedAsBad", description="Flagged as problematic")
    calculated_nutrition: Optional[NutritionSnapshotIn] = Field(None, alias="calculatedNutrition")


class MealIn(BaseModel):
    type: MealType
    time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    foods: List[FoodIn] = Field(..., min_length=1, description="At least one food")
    notes: Optional[str] = Field(None, max_length=500)


class SymptomIn(BaseModel):
    type: SymptomType
    intensity: int = Field(..., ge=1, le=5, description="1 (mild) to 5 (severe)")
    time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    duration: Optional[float] = Field(None, ge=0, description="Minutes")
    notes: Optional[str] = Field(None, max_length=500)


class CreateMealRequest(BaseModel):
    date: CalendarDate = Field(..., description="YYYY-MM-DD")
    meal: MealIn


class CreateSymptomRequest(BaseModel):
    date: CalendarDate = Field(..., description="YYYY-MM-DD")
    symptom: SymptomIn


class MealPatch(BaseModel):
    type: Optional[MealType] = None
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    foods: Optional[List[FoodIn]] = Field(None, min_length=1)
    notes: Optional[str] = Field(None, max_length=500)


class SymptomPatch(BaseModel):
    type: Optional[SymptomType] = None
    intensity: Optional[int] = Field(None, ge=1, le=5)
    time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    duration: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)


class UpdateEntryRequest(BaseModel):
    """Partial update. No ``type``: an entry keeps its kind."""

    meal: Optional[MealPatch] = None
    symptom: Optional[SymptomPatch] = None


# ---- Query / path parameters ----


class DiaryQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: Optional[CalendarDate] = None
    start_date: Optional[CalendarDate] = Field(None, alias="startDate")
    end_date: Optional[CalendarDate] = Field(None, alias="endDate")
    type: Optional[Literal["meal", "symptom", "all"]] = None


class SymptomsOverviewQuery(BaseModel):
    days: Optional[str] = Field(None, pattern=r"^[0-9]+$", description="Window in days (default 30)")

    @field_validator("days")
    @classmethod
    def _bounded_window(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and int(value) > MAX_OVERVIEW_DAYS:
            raise ValueError(f"days must be at most {MAX_OVERVIEW_DAYS}")
        return value

    @property
    def window_days(self) -> int:
        return int(self.days) if self.days else DEFAULT_OVERVIEW_DAYS


class EntryIdParams(BaseModel):
    id: str = Field(..., min_length=1)


class DayDateParams(BaseModel):
    date: CalendarDate


class MonthParams(BaseModel):
    year: str = Field(..., pattern=r"^[0-9]{4}$")
    month: str = Field(..., pattern=r"^(0?[1-9]|1[0-2])$")

    @field_validator("year")
    @classmethod
    def _real_year(cls, value: str) -> str:
        if int(value) < 1:
            raise ValueError("year must be between 0001 and 9999")
        return value

    @property
    def year_number(self) -> int:
        return int(self.year)

    @property
    def month_number(self) -> int:
        return int(self.month)


def parse_payload(model_cls: Type[M], payload: Any) -> Tuple[Optional[M], List[FieldViolation]]:
    """Validate an untyped payload; a non-object payload is reported, not raised."""
    try:
        return model_cls.model_validate(payload if payload is not None else {}), []
    except PydanticValidationError as exc:
        return None, violations_from_errors(exc.errors())


def parse_create_meal(payload: Any) -> Tuple[Optional[CreateMealRequest], List[FieldViolation]]:
    return parse_payload(CreateMealRequest, payload)


def parse_create_symptom(payload: Any) -> Tuple[Optional[CreateSymptomRequest], List[FieldViolation]]:
    return parse_payload(CreateSymptomRequest, payload)


def parse_update_entry(payload: Any) -> Tuple[Optional[UpdateEntryRequest], List[FieldViolation]]:
    return parse_payload(UpdateEntryRequest, payload)


def parse_diary_query(payload: Any) -> Tuple[Optional[DiaryQuery], List[FieldViolation]]:
    return parse_payload(DiaryQuery, payload)


def parse_symptoms_overview_query(
    payload: Any,
) -> Tuple[Optional[SymptomsOverviewQuery], List[FieldViolation]]:
    return parse_payload(SymptomsOverviewQuery, payload)


def parse_entry_id_params(payload: Any) -> Tuple[Optional[EntryIdParams], List[FieldViolation]]:
    return parse_payload(EntryIdParams, payload)


def parse_day_date_params(payload: Any) -> Tuple[Optional[DayDateParams], List[FieldViolation]]:
    return parse_payload(DayDateParams, payload)


def parse_month_params(payload: Any) -> Tuple[Optional[MonthParams], List[FieldViolation]]:
    return parse_payload(MonthParams, payload)


# ---- Responses ----


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None


class DiaryEntryOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(..., alias="userId")
    type: EntryType
    date: str = Field(..., description="YYYY-MM-DD")
    meal: Optional[MealData] = None
    symptom: Optional[SymptomData] = None
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")


class DaySummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    meals_count: int = Field(0, alias="mealsCount")
    symptoms_count: int = Field(0, alias="symptomsCount")
    worst_symptom_intensity: int = Field(0, alias="worstSymptomIntensity")
    status: DayStatus = "empty"
    problematic_foods_count: int = Field(0, alias="problematicFoodsCount")


class MonthSummary(BaseModel):
    year: int
    month: int
    days: List[DaySummary]


class SymptomCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: SymptomType
    count: int
    avg_intensity: float = Field(..., alias="avgIntensity")


class SymptomTrend(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: str
    count: int
    avg_intensity: float = Field(..., alias="avgIntensity")


class FoodCorrelation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    food_id: int = Field(..., alias="foodId")
    food_name: str = Field(..., alias="foodName")
    occurrences: int
    avg_intensity: float = Field(..., alias="avgIntensity")


class SymptomsOverview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_symptoms: int = Field(..., alias="totalSymptoms")
    avg_intensity: float = Field(..., alias="avgIntensity")
    most_frequent: List[SymptomCount] = Field(default_factory=list, alias="mostFrequent")
    trends: List[SymptomTrend] = Field(default_factory=list)
    food_correlations: List[FoodCorrelation] = Field(default_factory=list, alias="foodCorrelations")
    period_start: str = Field(..., alias="periodStart")
    period_end: str = Field(..., alias="periodEnd")
