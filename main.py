import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings
from database import get_session_factory
from periods import (
    Period,
    custom_period,
    resolve_statement_period,
    resolve_trend_period,
)
from schemas import (
    ActivityReminder,
    DailySeriesPoint,
    DetailedStatement,
    DishRevenue,
    RecurringExpenseOut,
    Statement,
)
from services import RecurringExpenseService, ReportService

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Restaurant P&L Ledger")


def get_db(session_factory: sessionmaker = Depends(get_session_factory)):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def trend_period_from_request(request: Request) -> Period:
    params = request.query_params
    try:
        return resolve_trend_period(
            params.get("startDate"), params.get("endDate"), params.get("days")
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def breakdown_period_from_request(request: Request) -> Period:
    params = request.query_params
    try:
        return custom_period(params.get("startDate"), params.get("endDate"))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def statement_period_from_request(request: Request) -> Period:
    params = request.query_params
    try:
        return resolve_statement_period(params.get("start"), params.get("end"))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def optional_period_from_request(request: Request) -> Optional[Period]:
    """A custom window when both bounds are given, otherwise no window."""
    params = request.query_params
    start = params.get("startDate")
    end = params.get("endDate")
    if not (start and end):
        return None
    try:
        return custom_period(start, end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _run_report(name: str, restaurant_id: int, period: Period, build):
    try:
        return build()
    except Exception as exc:
        logger.exception(
            f"report_failed: report={name} restaurant_id={restaurant_id} "
            f"period={period.label()}"
        )
        raise HTTPException(status_code=500, detail=f"Failed to build {name}") from exc


@app.get(
    "/api/restaurants/{restaurant_id}/reports/daily-revenue-margin",
    response_model=list[DailySeriesPoint],
)
def api_daily_revenue_margin(
    restaurant_id: int,
    period: Period = Depends(trend_period_from_request),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    service = ReportService(session_factory, restaurant_id)
    return _run_report(
        "daily_revenue_margin",
        restaurant_id,
        period,
        lambda: service.daily_revenue_margin(period),
    )


@app.get("/api/restaurants/{restaurant_id}/reports/expenses-by-category")
def api_expenses_by_category(
    restaurant_id: int,
    period: Period = Depends(breakdown_period_from_request),
    session_factory: sessionmaker = Depends(get_session_factory),
) -> dict[str, float]:
    service = ReportService(session_factory, restaurant_id)
    return _run_report(
        "expenses_by_category",
        restaurant_id,
        period,
        lambda: service.expenses_by_category(period),
    )


@app.get("/api/restaurants/{restaurant_id}/reports/pnl", response_model=Statement)
def api_pnl_statement(
    restaurant_id: int,
    period: Period = Depends(statement_period_from_request),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    service = ReportService(session_factory, restaurant_id)
    return _run_report(
        "pnl_statement", restaurant_id, period, lambda: service.statement(period)
    )


@app.get(
    "/api/restaurants/{restaurant_id}/reports/pnl/data",
    response_model=DetailedStatement,
)
def api_pnl_data(
    restaurant_id: int,
    period: Period = Depends(statement_period_from_request),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    service = ReportService(session_factory, restaurant_id)
    return _run_report(
        "pnl_data", restaurant_id, period, lambda: service.pnl_data(period)
    )


@app.get(
    "/api/restaurants/{restaurant_id}/expenses",
    response_model=list[RecurringExpenseOut],
)
def api_recurring_expenses(
    restaurant_id: int,
    category: Optional[str] = None,
    period: Optional[Period] = Depends(optional_period_from_request),
    db: Session = Depends(get_db),
):
    return RecurringExpenseService(db, restaurant_id).list_with_totals(
        period, category
    )


@app.get(
    "/api/restaurants/{restaurant_id}/reports/revenue-by-dish",
    response_model=list[DishRevenue],
)
def api_revenue_by_dish(
    restaurant_id: int,
    period: Optional[Period] = Depends(optional_period_from_request),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    service = ReportService(session_factory, restaurant_id)
    try:
        return service.revenue_by_dish(period)
    except Exception as exc:
        logger.exception(
            f"report_failed: report=revenue_by_dish restaurant_id={restaurant_id}"
        )
        raise HTTPException(
            status_code=500, detail="Failed to build revenue_by_dish"
        ) from exc


@app.get(
    "/api/restaurants/{restaurant_id}/reports/pnl/reminder",
    response_model=ActivityReminder,
)
def api_pnl_reminder(
    restaurant_id: int,
    session_factory: sessionmaker = Depends(get_session_factory),
):
    service = ReportService(session_factory, restaurant_id)
    try:
        return service.activity_reminder()
    except Exception as exc:
        logger.exception(
            f"report_failed: report=pnl_reminder restaurant_id={restaurant_id}"
        )
        raise HTTPException(status_code=500, detail="Failed to check reminder") from exc
