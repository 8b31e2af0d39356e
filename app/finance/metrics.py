from typing import Optional


def pct_change(current: float, previous: Optional[float]) -> float:
    """
    Percentage change against the previous value, rounded to one decimal.

    Zero (or missing) previous values give 0. The divisor is |previous| so a swing
    from a loss to a profit still reports a positive change.
    """
    if not previous:
        return 0.0
    return round((current - previous) / abs(previous) * 100, 1)


def share_pct(part: float, total: float) -> float:
    """`part` as a percentage of `total`, one decimal; 0 when the total is 0."""
    if not total:
        return 0.0
    return round(part / total * 100, 1)
