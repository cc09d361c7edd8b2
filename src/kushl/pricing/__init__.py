"""
Commission-tier pricing math.
"""
from kushl.pricing.commission import (
    CURRENCY,
    PLATFORM_CHARGES_TIERS,
    TASK_CATEGORIES,
    CommissionTier,
    calculate_platform_commission,
    calculate_student_earnings,
    format_price,
    get_commission_percentage,
    get_commission_tier,
)

__all__ = [
    "CURRENCY",
    "PLATFORM_CHARGES_TIERS",
    "TASK_CATEGORIES",
    "CommissionTier",
    "calculate_platform_commission",
    "calculate_student_earnings",
    "format_price",
    "get_commission_percentage",
    "get_commission_tier",
]
