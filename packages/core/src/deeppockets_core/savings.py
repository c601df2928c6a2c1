"""Savings goal planning."""

from datetime import date
from decimal import Decimal
from typing import Optional

import structlog

from .debt import months_between
from .exceptions import ValidationError
from .models import Category, SavingsPlan

logger = structlog.get_logger()


def calculate_savings_plan(
    target_amount: Decimal,
    target_date: date,
    category: Category,
    income: Decimal,
    start_date: Optional[date] = None,
) -> SavingsPlan:
    """
    Monthly savings needed to reach ``target_amount`` by ``target_date``.

    Args:
        target_amount: Goal total
        target_date: Date the goal should be reached
        category: Savings category the money comes from
        income: Monthly income
        start_date: Plan start (default: today)

    Returns:
        SavingsPlan; ``can_save`` is True when the required monthly amount
        fits the category's share of income
    """
    if target_amount < 0:
        raise ValidationError(
            "Savings target cannot be negative",
            field="target_amount",
            value=str(target_amount),
            constraint="target_amount >= 0",
        )

    months = months_between(start_date or date.today(), target_date)
    required = target_amount / months
    recommended = income * category.allocation_percentage

    logger.debug(
        "savings_plan_calculated",
        category_id=category.id,
        months=months,
        required=str(required),
        recommended=str(recommended),
    )
    return SavingsPlan(
        target_amount=target_amount,
        months_to_goal=months,
        required_monthly_savings=required,
        recommended_monthly_savings=recommended,
        can_save=required <= recommended,
    )
