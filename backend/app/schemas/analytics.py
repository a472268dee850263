"""Analytics response schemas."""

from typing import List, Union

from pydantic import BaseModel


class AnalyticsOverview(BaseModel):
    total_students: int
    total_interactions: int
    students_needing_interaction: int
    priority_students: int
    follow_ups_required: int
    overdue_follow_ups: int
    recent_interactions: int


class CohortCount(BaseModel):
    cohort: Union[int, str]
    count: int


class InteractionTypeCount(BaseModel):
    type: str
    count: int
    percentage: int


class StaffPerformance(BaseModel):
    staff_member: str
    interactions: int


class AnalyticsBreakdown(BaseModel):
    students_by_cohort: List[CohortCount]
    interaction_types: List[InteractionTypeCount]
    staff_performance: List[StaffPerformance]


class MonthlyTrend(BaseModel):
    month: str
    interactions: int
    follow_ups: int


class AnalyticsFilters(BaseModel):
    cohort: Union[int, str]
    date_range: int


class AnalyticsResponse(BaseModel):
    overview: AnalyticsOverview
    breakdown: AnalyticsBreakdown
    trends: List[MonthlyTrend]
    filters: AnalyticsFilters
    formula_source: str
