# -*- coding: utf-8 -*-
"""Diary domain: meal and symptom entries logged per day.

Public surface for the rest of the app: the router, the entry model and
its validation gate, the request schemas and the service functions.
"""

from . import service
from .api import router
from .models import (
    DiaryEntry,
    EntryType,
    MealData,
    MealEntry,
    MealType,
    SymptomData,
    SymptomEntry,
    SymptomType,
    check_entry_document,
    validate_entry_document,
)
from .schemas import (
    CreateMealRequest,
    CreateSymptomRequest,
    DiaryQuery,
    MonthParams,
    SymptomsOverviewQuery,
    UpdateEntryRequest,
    parse_create_meal,
    parse_create_symptom,
    parse_day_date_params,
    parse_diary_query,
    parse_entry_id_params,
    parse_month_params,
    parse_symptoms_overview_query,
    parse_update_entry,
)

__all__ = [
    "CreateMealRequest",
    "CreateSymptomRequest",
    "DiaryEntry",
    "DiaryQuery",
    "EntryType",
    "MealData",
    "MealEntry",
    "MealType",
    "MonthParams",
    "SymptomData",
    "SymptomEntry",
    "SymptomType",
    "SymptomsOverviewQuery",
    "UpdateEntryRequest",
    "check_entry_document",
    "parse_create_meal",
    "parse_create_symptom",
    "parse_day_date_params",
    "parse_diary_query",
    "parse_entry_id_params",
    "parse_month_params",
    "parse_symptoms_overview_query",
    "parse_update_entry",
    "router",
    "service",
    "validate_entry_document",
]
