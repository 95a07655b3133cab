from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from orderboard.deps import get_analytics
from orderboard.schemas.dashboard import DashboardStats, FinanceSummary, MonthlyRevenuePoint, StatusCount
from orderboard.services.analytics import AnalyticsAggregator

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(analytics: AnalyticsAggregator = Depends(get_analytics)):
    return DashboardStats(**analytics.get_stats())


@router.get("/revenue", response_model=List[MonthlyRevenuePoint])
def dashboard_revenue(analytics: AnalyticsAggregator = Depends(get_analytics)):
    return [MonthlyRevenuePoint(**point) for point in analytics.get_monthly_revenue()]


@router.get("/status-distribution", response_model=List[StatusCount])
def dashboard_status_distribution(analytics: AnalyticsAggregator = Depends(get_analytics)):
    return [StatusCount(**row) for row in analytics.get_status_distribution()]


@router.get("/finances", response_model=FinanceSummary)
def dashboard_finances(analytics: AnalyticsAggregator = Depends(get_analytics)):
    return FinanceSummary(**analytics.get_finance_summary())
