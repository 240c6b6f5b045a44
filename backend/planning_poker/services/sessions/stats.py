import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Any, Iterable, Optional, Tuple

from planning_poker.models import Statistics

UNSURE_VOTE = '?'
# wide enough for any finite float
_ROUNDING = Context(prec=400, rounding=ROUND_HALF_UP)


def _as_number(value: Any):
    """Return the numeric value of a vote card, or None when it has none."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    try:
        finite = math.isfinite(float(number))
    except OverflowError:
        return None
    if not finite:
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _mean(numbers):
    count = len(numbers)
    try:
        mean = sum(numbers) / count
    except OverflowError:
        mean = math.inf
    if not math.isfinite(mean):
        # values near the float limit: divide first so the total stays finite
        mean = sum(n / count for n in numbers)
    return mean


def calculate_statistics(votes: Iterable[Tuple[str, Any]], unsure_vote=UNSURE_VOTE) -> Optional[Statistics]:
    """Summarize a finished round.

    ``votes`` is a sequence of (name, value) pairs. The unsure card and any
    value that is not a number are left out. Returns None when nothing
    numeric remains. Average is rounded to one decimal place, ties upward.
    """
    numbers = []
    for _name, value in votes:
        if value == unsure_vote:
            continue
        number = _as_number(value)
        if number is not None:
            numbers.append(number)
    if not numbers:
        return None
    average = float(Decimal(_mean(numbers)).quantize(Decimal('0.1'), context=_ROUNDING))
    return Statistics(average=average, min=min(numbers), max=max(numbers))
