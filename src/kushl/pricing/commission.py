"""
Platform commission tiers and price helpers.
"""

import math
from dataclasses import dataclass

CURRENCY = "₹"


@dataclass(frozen=True)
class CommissionTier:
    """Inclusive price bracket charged a fixed platform percentage."""

    min_amount: float
    max_amount: float
    commission_percentage: int

    def contains(self, amount: float) -> bool:
        return self.min_amount <= amount <= self.max_amount


PLATFORM_CHARGES_TIERS: tuple[CommissionTier, ...] = (
    CommissionTier(min_amount=0, max_amount=999, commission_percentage=15),
    CommissionTier(min_amount=1000, max_amount=4999, commission_percentage=10),
    CommissionTier(min_amount=5000, max_amount=9999, commission_percentage=7),
    CommissionTier(min_amount=10000, max_amount=49999, commission_percentage=5),
    CommissionTier(min_amount=50000, max_amount=100000, commission_percentage=3),
)


def get_commission_tier(amount: float) -> CommissionTier:
    """Return the tier containing ``amount``.

    Amounts outside every bracket (negative, above the top bracket, or
    between two integer brackets such as 999.5) use the last tier.
    """
    for tier in PLATFORM_CHARGES_TIERS:
        if tier.contains(amount):
            return tier
    return PLATFORM_CHARGES_TIERS[-1]


def get_commission_percentage(amount: float) -> int:
    return get_commission_tier(amount).commission_percentage


def calculate_platform_commission(amount: float) -> int:
    """Platform fee for ``amount``, rounded to the nearest whole unit."""
    percentage = get_commission_percentage(amount)
    # halves round up, not to even
    return math.floor(amount * percentage / 100 + 0.5)


def calculate_student_earnings(amount: float) -> float:
    """What the student receives once the platform fee is deducted."""
    return amount - calculate_platform_commission(amount)


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_price(amount: float) -> str:
    """Format ``amount`` with the currency symbol and Indian digit grouping.

    >>> format_price(100000)
    '₹1,00,000'
    """
    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):.3f}".partition(".")
    fraction = fraction.rstrip("0")
    text = _group_indian(whole)
    if fraction:
        text = f"{text}.{fraction}"
    return f"{sign}{CURRENCY}{text}"


TASK_CATEGORIES: tuple[str, ...] = (
    "Website Development",
    "Video Editing",
    "Software Development",
    "Search Engine Optimization",
    "Architecture & Interior Design",
    "Book Design",
    "User Generated Content",
    "Voice Over",
    "Social Media Marketing",
    "AI Development",
    "Logo Design",
    "Graphics & Design",
    "Digital Marketing",
    "Writing & Translation",
    "Animation",
    "Music & Audio",
    "Programming & Tech",
    "Business Consulting",
    "Data Analysis",
    "Photography",
    "Finance",
    "Legal Services",
)
