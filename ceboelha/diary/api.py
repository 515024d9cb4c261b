# -*- coding: utf-8 -*-
"""Diary — API endpoints."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, Query

from ..auth.security import get_current_user
from ..config import settings
from ..errors import FieldViolation, ValidationError
from . import service
from .schemas import (
    ApiResponse,
    CreateMealRequest,
    CreateSymptomRequest,
    DaySummary,
    DiaryEntryOut,
    MonthSummary,
    SymptomsOverview,
    UpdateEntryRequest,
    parse_day_date_params,
    parse_diary_query,
    parse_entry_id_params,
    parse_month_params,
    parse_symptoms_overview_query,
)

router = APIRouter(prefix="/api/diary", tags=["Diary"])


def _parse_or_400(parser: Callable[[Dict[str, Any]], Tuple[Any, List[FieldViolation]]], payload: Dict[str, Any]) -> Any:
    value, violations = parser({k: v for k, v in payload.items() if v is not None})
    if violations:
        raise ValidationError(violations)
    return value


# Fixed paths first so they are not captured by /{entry_id}.


@router.get(
    "/symptoms/overview",
    response_model=ApiResponse[SymptomsOverview],
    summary="Symptom totals, trends and food correlations",
)
def symptoms_overview(
    days: Optional[str] = Query(default=None, description="Window in days (default 30)"),
    user: dict = Depends(get_current_user),
):
    query = _parse_or_400(parse_symptoms_overview_query, {"days": days})
    overview = service.get_symptoms_overview(user["id"], query.window_days, tz=settings.tz)
    return {"success": True, "data": overview}


@router.get(
    "/symptoms/worst",
    response_model=ApiResponse[List[DiaryEntryOut]],
    response_model_exclude_none=True,
    summary="Most intense symptom entries",
)
def worst_symptoms(
    limit: int = Query(default=10, ge=1, le=100),
    user: dict = Depends(get_current_user),
):
    return {"success": True, "data": service.get_worst_symptoms(user["id"], limit, tz=settings.tz)}


@router.get(
    "/foods/{food_id}",
    response_model=ApiResponse[List[DiaryEntryOut]],
    response_model_exclude_none=True,
    summary="Meal entries containing a food",
)
def food_history(food_id: int, user: dict = Depends(get_current_user)):
    return {"success": True, "data": service.get_food_history(user["id"], food_id, tz=settings.tz)}


@router.get("/summary/day/{date}", response_model=ApiResponse[DaySummary], summary="Day summary")
def day_summary(date: str, user: dict = Depends(get_current_user)):
    params = _parse_or_400(parse_day_date_params, {"date": date})
    return {"success": True, "data": service.get_day_summary(user["id"], params.date, tz=settings.tz)}


@router.get(
    "/summary/month/{year}/{month}",
    response_model=ApiResponse[MonthSummary],
    summary="Month summary (calendar)",
)
def month_summary(year: str, month: str, user: dict = Depends(get_current_user)):
    params = _parse_or_400(parse_month_params, {"year": year, "month": month})
    summary = service.get_month_summary(user["id"], params.year_number, params.month_number, tz=settings.tz)
    return {"success": True, "data": summary}


@router.get(
    "",
    response_model=ApiResponse[List[DiaryEntryOut]],
    response_model_exclude_none=True,
    summary="List diary entries",
)
def list_entries(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD"),
    start_date: Optional[str] = Query(default=None, alias="startDate", description="YYYY-MM-DD"),
    end_date: Optional[str] = Query(default=None, alias="endDate", description="YYYY-MM-DD"),
    entry_type: Optional[str] = Query(default=None, alias="type", description="meal | symptom | all"),
    user: dict = Depends(get_current_user),
):
    query = _parse_or_400(
        parse_diary_query,
        {"date": date, "startDate": start_date, "endDate": end_date, "type": entry_type},
    )
    return {"success": True, "data": service.get_entries(user["id"], query, tz=settings.tz)}


@router.get(
    "/{entry_id}",
    response_model=ApiResponse[DiaryEntryOut],
    response_model_exclude_none=True,
    summary="Get a diary entry",
)
def get_entry(entry_id: str, user: dict = Depends(get_current_user)):
    params = _parse_or_400(parse_entry_id_params, {"id": entry_id})
    return {"success": True, "data": service.get_entry_by_id(user["id"], params.id, tz=settings.tz)}


@router.post(
    "/meal",
    response_model=ApiResponse[DiaryEntryOut],
    response_model_exclude_none=True,
    summary="Log a meal",
)
def create_meal(request: CreateMealRequest, user: dict = Depends(get_current_user)):
    return {"success": True, "data": service.create_meal_entry(user["id"], request, tz=settings.tz)}


@router.post(
    "/symptom",
    response_model=ApiResponse[DiaryEntryOut],
    response_model_exclude_none=True,
    summary="Log a symptom",
)
def create_symptom(request: CreateSymptomRequest, user: dict = Depends(get_current_user)):
    return {"success": True, "data": service.create_symptom_entry(user["id"], request, tz=settings.tz)}


@router.patch(
    "/{entry_id}",
    response_model=ApiResponse[DiaryEntryOut],
    response_model_exclude_none=True,
    summary="Update a diary entry",
)
def update_entry(entry_id: str, request: UpdateEntryRequest, user: dict = Depends(get_current_user)):
    params = _parse_or_400(parse_entry_id_params, {"id": entry_id})
    return {"success": True, "data": service.update_entry(user["id"], params.id, request, tz=settings.tz)}


@router.delete("/{entry_id}", summary="Delete a diary entry")
def delete_entry(entry_id: str, user: dict = Depends(get_current_user)):
    params = _parse_or_400(parse_entry_id_params, {"id": entry_id})
    service.delete_entry(user["id"], params.id)
    return {"success": True}
