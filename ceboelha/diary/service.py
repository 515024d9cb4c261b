# -*- coding: utf-8 -*-
"""Diary — business logic.

Entry CRUD, day/month summaries for the calendar and the symptom overview
(totals, trends and foods marked as bad). Timezone and clock are passed in;
when omitted they come from ``settings`` and the system clock.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from ..config import settings
from ..errors import ForbiddenError, NotFoundError
from ..utils import (
    format_date,
    get_days_in_month,
    get_end_of_day,
    get_end_of_month,
    get_start_of_day,
    get_start_of_month,
)
from . import storage
from .models import MealData, MealEntry, SymptomData, SymptomEntry, entry_to_document, validate_entry_document
from .schemas import (
    DEFAULT_OVERVIEW_DAYS,
    MAX_OVERVIEW_DAYS,
    CreateMealRequest,
    CreateSymptomRequest,
    DaySummary,
    DayStatus,
    DiaryEntryOut,
    DiaryQuery,
    FoodCorrelation,
    MonthSummary,
    SymptomCount,
    SymptomsOverview,
    SymptomTrend,
    UpdateEntryRequest,
)

logger = logging.getLogger(__name__)

TREND_MAX_DAYS = 14

# Patch fields that may be cleared by sending null; the rest ignore null.
_CLEARABLE_FIELDS = {"notes", "duration"}


def _tz(tz: Optional[tzinfo]) -> tzinfo:
    return tz or settings.tz


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _round1(value: float) -> float:
    # Half-up, not banker's rounding.
    return math.floor(value * 10 + 0.5) / 10


def _mean(values: Sequence[float]) -> float:
    return _round1(sum(values) / len(values)) if values else 0.0


def _entry_datetime(date_str: str, time_str: str, tz: tzinfo) -> datetime:
    return datetime.strptime(f"{date_str} {time_str}", "%Y-%m-%d %H:%M").replace(tzinfo=tz)


def calculate_day_status(worst_intensity: int, symptoms_count: int) -> DayStatus:
    if symptoms_count == 0:
        return "great"
    if worst_intensity <= 2:
        return "good"
    if worst_intensity == 3:
        return "okay"
    if worst_intensity == 4:
        return "bad"
    return "terrible"


def format_entry(entry: storage.Entry, tz: Optional[tzinfo] = None) -> DiaryEntryOut:
    return DiaryEntryOut(
        id=entry.id,
        user_id=entry.user_id,
        type=entry.type,
        date=format_date(entry.date, _tz(tz)),
        meal=entry.meal,
        symptom=entry.symptom,
        created_at=_iso(entry.created_at),
        updated_at=_iso(entry.updated_at),
    )


def _summarize_day(date_str: str, entries: Sequence[storage.Entry]) -> DaySummary:
    meals = [e for e in entries if isinstance(e, MealEntry)]
    symptoms = [e for e in entries if isinstance(e, SymptomEntry)]
    worst = max((e.symptom.intensity for e in symptoms), default=0)
    problematic = sum(1 for e in meals for food in e.meal.foods if food.marked_as_bad)
    return DaySummary(
        date=date_str,
        meals_count=len(meals),
        symptoms_count=len(symptoms),
        worst_symptom_intensity=worst,
        status="empty" if not entries else calculate_day_status(worst, len(symptoms)),
        problematic_foods_count=problematic,
    )


def _get_owned_entry(user_id: str, entry_id: str, action: str) -> storage.Entry:
    entry = storage.get_entry(entry_id)
    if entry is None:
        raise NotFoundError("Diary entry")
    if entry.user_id != user_id:
        raise ForbiddenError(f"You do not have permission to {action} this entry")
    return entry


# ---- Queries ----


def get_entries(user_id: str, query: DiaryQuery, *, tz: Optional[tzinfo] = None) -> List[DiaryEntryOut]:
    zone = _tz(tz)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    if query.date:
        start, end = get_start_of_day(query.date, zone), get_end_of_day(query.date, zone)
    elif query.start_date and query.end_date:
        start, end = get_start_of_day(query.start_date, zone), get_end_of_day(query.end_date, zone)

    entry_type = query.type if query.type and query.type != "all" else None
    entries = storage.find_entries(user_id, start=start, end=end, entry_type=entry_type)
    return [format_entry(e, zone) for e in entries]


def get_entry_by_id(user_id: str, entry_id: str, *, tz: Optional[tzinfo] = None) -> DiaryEntryOut:
    return format_entry(_get_owned_entry(user_id, entry_id, "access"), tz)


def get_food_history(user_id: str, food_id: int, *, tz: Optional[tzinfo] = None) -> List[DiaryEntryOut]:
    return [format_entry(e, tz) for e in storage.find_entries_with_food(user_id, food_id)]


def get_worst_symptoms(user_id: str, limit: int = 10, *, tz: Optional[tzinfo] = None) -> List[DiaryEntryOut]:
    return [format_entry(e, tz) for e in storage.find_most_intense_symptoms(user_id, limit=limit)]


def get_day_summary(user_id: str, date_str: str, *, tz: Optional[tzinfo] = None) -> DaySummary:
    zone = _tz(tz)
    entries = storage.find_entries(
        user_id,
        start=get_start_of_day(date_str, zone),
        end=get_end_of_day(date_str, zone),
    )
    return _summarize_day(date_str, entries)


def get_month_summary(user_id: str, year: int, month: int, *, tz: Optional[tzinfo] = None) -> MonthSummary:
    zone = _tz(tz)
    entries = storage.find_entries(
        user_id,
        start=get_start_of_month(year, month, zone),
        end=get_end_of_month(year, month, zone),
    )

    by_day: Dict[str, List[storage.Entry]] = defaultdict(list)
    for entry in entries:
        by_day[format_date(entry.date, zone)].append(entry)

    days: List[DaySummary] = []
    for day in range(1, get_days_in_month(year, month) + 1):
        date_str = f"{year:04d}-{month:02d}-{day:02d}"
        days.append(_summarize_day(date_str, by_day.get(date_str, [])))
    return MonthSummary(year=year, month=month, days=days)


def get_symptoms_overview(
    user_id: str,
    days: int = DEFAULT_OVERVIEW_DAYS,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> SymptomsOverview:
    zone = _tz(tz)
    days = min(days, MAX_OVERVIEW_DAYS)
    today = (now or _utc_now()).astimezone(zone)
    start = get_start_of_day(today - timedelta(days=days), zone)
    end = get_end_of_day(today, zone)

    entries = storage.find_entries(user_id, start=start, end=end)
    symptom_entries = [e for e in entries if isinstance(e, SymptomEntry)]
    meal_entries = [e for e in entries if isinstance(e, MealEntry)]

    intensities_by_day: Dict[str, List[int]] = defaultdict(list)
    intensities_by_type: Dict[str, List[int]] = {}
    for entry in symptom_entries:
        intensities_by_day[format_date(entry.date, zone)].append(entry.symptom.intensity)
        intensities_by_type.setdefault(entry.symptom.type.value, []).append(entry.symptom.intensity)

    most_frequent = sorted(
        (
            SymptomCount(type=kind, count=len(values), avg_intensity=_mean(values))
            for kind, values in intensities_by_type.items()
        ),
        key=lambda item: item.count,
        reverse=True,
    )

    trends: List[SymptomTrend] = []
    for offset in range(min(days, TREND_MAX_DAYS) - 1, -1, -1):
        date_str = format_date(today - timedelta(days=offset), zone)
        values = intensities_by_day.get(date_str, [])
        trends.append(SymptomTrend(date=date_str, count=len(values), avg_intensity=_mean(values)))

    # Foods marked as bad, scored by the intensity of symptoms logged the same day.
    correlations: Dict[int, Dict[str, Any]] = {}
    for entry in meal_entries:
        same_day = intensities_by_day.get(format_date(entry.date, zone), [])
        for food in entry.meal.foods:
            if not food.marked_as_bad:
                continue
            slot = correlations.setdefault(
                food.food_id, {"food_name": food.food_name, "occurrences": 0, "intensities": []}
            )
            slot["occurrences"] += 1
            slot["intensities"].extend(same_day)

    food_correlations = sorted(
        (
            FoodCorrelation(
                food_id=food_id,
                food_name=slot["food_name"],
                occurrences=slot["occurrences"],
                avg_intensity=_mean(slot["intensities"]),
            )
            for food_id, slot in correlations.items()
        ),
        key=lambda item: item.occurrences,
        reverse=True,
    )

    all_intensities = [e.symptom.intensity for e in symptom_entries]
    return SymptomsOverview(
        total_symptoms=len(symptom_entries),
        avg_intensity=_mean(all_intensities),
        most_frequent=most_frequent,
        trends=trends,
        food_correlations=food_correlations,
        period_start=format_date(start, zone),
        period_end=format_date(end, zone),
    )


# ---- Commands ----


def create_meal_entry(
    user_id: str,
    data: CreateMealRequest,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> DiaryEntryOut:
    zone = _tz(tz)
    stamp = now or _utc_now()
    meal = MealData.model_validate(data.meal.model_dump(mode="json", by_alias=True, exclude_none=True))
    entry = MealEntry(
        id=str(uuid4()),
        user_id=user_id,
        date=_entry_datetime(data.date, meal.time, zone),
        meal=meal,
        created_at=stamp,
        updated_at=stamp,
    )
    storage.insert_entry(entry)
    logger.info(
        "meal_logged user=%s entry=%s meal_type=%s foods=%d", user_id, entry.id, meal.type.value, len(meal.foods)
    )
    return format_entry(entry, zone)


def create_symptom_entry(
    user_id: str,
    data: CreateSymptomRequest,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> DiaryEntryOut:
    zone = _tz(tz)
    stamp = now or _utc_now()
    symptom = SymptomData.model_validate(data.symptom.model_dump(mode="json", exclude_none=True))
    entry = SymptomEntry(
        id=str(uuid4()),
        user_id=user_id,
        date=_entry_datetime(data.date, symptom.time, zone),
        symptom=symptom,
        created_at=stamp,
        updated_at=stamp,
    )
    storage.insert_entry(entry)
    logger.info(
        "symptom_logged user=%s entry=%s symptom_type=%s intensity=%d",
        user_id,
        entry.id,
        symptom.type.value,
        symptom.intensity,
    )
    return format_entry(entry, zone)


def update_entry(
    user_id: str,
    entry_id: str,
    data: UpdateEntryRequest,
    *,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> DiaryEntryOut:
    """Apply a partial update to the payload matching the entry's type.

    A ``symptom`` patch sent for a meal entry (or the reverse) is ignored, and
    the entry's ``type`` never changes.
    """
    entry = _get_owned_entry(user_id, entry_id, "edit")
    doc = entry_to_document(entry)

    patch = None
    if isinstance(entry, MealEntry) and data.meal is not None:
        patch = ("meal", data.meal)
    elif isinstance(entry, SymptomEntry) and data.symptom is not None:
        patch = ("symptom", data.symptom)

    if patch is not None:
        key, model = patch
        fields = model.model_dump(mode="json", by_alias=True, exclude_unset=True)
        if fields.get("foods"):
            fields["foods"] = [food.model_dump(mode="json", by_alias=True, exclude_none=True) for food in model.foods]
        changes = {
            name: value for name, value in fields.items() if value is not None or name in _CLEARABLE_FIELDS
        }
        doc[key] = {**doc[key], **changes}

    doc["updatedAt"] = _iso(now or _utc_now())
    updated = validate_entry_document(doc)
    storage.replace_entry(updated)
    return format_entry(updated, tz)


def delete_entry(user_id: str, entry_id: str) -> None:
    entry = _get_owned_entry(user_id, entry_id, "delete")
    storage.delete_entry(entry.id)
    logger.info("entry_deleted user=%s entry=%s type=%s", user_id, entry.id, entry.type)
