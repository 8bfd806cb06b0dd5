from __future__ import annotations

import enum


class RowMode(enum.StrEnum):
    """Classification of a day row; only workdays carry clock times."""

    WORKDAY = "workday"
    PTO = "pto"
    PUBLIC_HOLIDAY = "public_holiday"
    COMPANY_HOLIDAY = "company_holiday"
    WEEKEND = "weekend"


class HolidayKind(enum.StrEnum):
    """Origin of a resolved holiday."""

    PUBLIC = "public"
    COMPANY = "company"
