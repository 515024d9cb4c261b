# -*- coding: utf-8 -*-
"""Diary — persisted entry model.

A diary entry is either a meal or a symptom. ``DiaryEntry`` is a tagged
union on ``type``, so a typed ``MealEntry`` always carries its ``meal`` and
a ``SymptomEntry`` its ``symptom``. Raw documents (from requests merged by
the service, or read back from the store) go through
``validate_entry_document`` which applies the pre-commit gate first.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import FieldViolation, ValidationError, violations_from_errors
from ..utils import TIME_PATTERN


class EntryType(str, Enum):
    meal = "meal"
    symptom = "symptom"


class MealType(str, Enum):
    breakfast = "breakfast"
    lunch = "lunch"
    dinner = "dinner"
    snack = "snack"


class SymptomType(str, Enum):
    bloating = "bloating"
    gas = "gas"
    cramps = "cramps"
    nausea = "nausea"
    diarrhea = "diarrhea"
    constipation = "constipation"
    reflux = "reflux"
    fatigue = "fatigue"
    headache = "headache"
    brain_fog = "brain_fog"
    other = "other"


class CalculatedNutrition(BaseModel):
    """Nutrition snapshot taken when the meal was logged; never recomputed here."""

    calories: Optional[float] = None
    carbs: Optional[float] = None
    protein: Optional[float] = None
    fat: Optional[float] = None
    sugar: Optional[float] = None
    fiber: Optional[float] = None
    sodium: Optional[float] = None


class DiaryFood(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    food_id: int = Field(..., alias="foodId", description="Id in the food catalog")
    food_name: str = Field(..., alias="foodName", min_length=1)
    portion: Optional[str] = None
    quantity_g: Optional[float] = Field(None, ge=0)
    marked_as_bad: bool = Field(False, alias="markedAsBad", description="User links this food to symptoms")
    calculated_nutrition: Optional[CalculatedNutrition] = Field(None, alias="calculatedNutrition")


class MealData(BaseModel):
    type: MealType
    time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    foods: List[DiaryFood] = Field(..., min_length=1)
    notes: Optional[str] = Field(None, max_length=500)


class SymptomData(BaseModel):
    type: SymptomType
    intensity: int = Field(..., ge=1, le=5)
    time: str = Field(..., pattern=TIME_PATTERN, description="HH:MM")
    duration: Optional[float] = Field(None, ge=0, description="Minutes")
    notes: Optional[str] = Field(None, max_length=500)


class _EntryBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(..., alias="userId", min_length=1)
    date: datetime
    meal: Optional[MealData] = None
    symptom: Optional[SymptomData] = None
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class MealEntry(_EntryBase):
    type: Literal["meal"] = "meal"
    meal: MealData


class SymptomEntry(_EntryBase):
    type: Literal["symptom"] = "symptom"
    symptom: SymptomData


DiaryEntry = Annotated[Union[MealEntry, SymptomEntry], Field(discriminator="type")]

_entry_adapter: TypeAdapter[Any] = TypeAdapter(DiaryEntry)


def check_entry_document(doc: Mapping[str, Any]) -> List[FieldViolation]:
    """Pre-commit gate: the payload named by ``type`` must be present.

    The other payload being set as well is not rejected.
    """
    violations: List[FieldViolation] = []
    entry_type = doc.get("type")
    if entry_type == EntryType.meal and not doc.get("meal"):
        violations.append(FieldViolation(field="meal", message='meal data is required when type is "meal"'))
    if entry_type == EntryType.symptom and not doc.get("symptom"):
        violations.append(
            FieldViolation(field="symptom", message='symptom data is required when type is "symptom"')
        )
    return violations


def validate_entry_document(doc: Mapping[str, Any]) -> Union[MealEntry, SymptomEntry]:
    violations = check_entry_document(doc)
    if violations:
        raise ValidationError(violations)
    try:
        return _entry_adapter.validate_python(dict(doc))
    except PydanticValidationError as exc:
        errors = exc.errors()
        tag = doc.get("type")
        for err in errors:
            loc = tuple(err.get("loc") or ())
            if err.get("type") in ("union_tag_invalid", "union_tag_not_found"):
                err["loc"] = ("type",)
            # Union errors are prefixed with the matched tag.
            elif loc and loc[0] == tag and len(loc) > 1:
                err["loc"] = loc[1:]
        raise ValidationError(violations_from_errors(errors)) from exc


def entry_to_document(entry: Union[MealEntry, SymptomEntry]) -> Dict[str, Any]:
    return entry.model_dump(mode="json", by_alias=True, exclude_none=True)
