"""
Cumulative average engine.

Folds a student's totals for one subject across the periods of a session
into a single figure. Three methods are supported:

- simple_average: plain mean of every period total.
- weighted_average: mean weighted by each period's ``weight`` (missing
  weights count as 1).
- progressive_average: weights taken from the period's position in the
  session (e.g. 30/30/40 for first/second/third term), normalised over the
  periods that actually have a total.
"""
from collections import namedtuple

from django.conf import settings

from .exceptions import InvalidConfigurationError
from .models import Result, ResultConfiguration

PeriodTotal = namedtuple("PeriodTotal", ["total", "weight", "order"], defaults=[None, 1])


def simple_average(entries):
    entries = list(entries)
    return sum(e.total for e in entries) / len(entries)


def weighted_average(entries):
    weighted_sum = 0.0
    weight_sum = 0.0
    for entry in entries:
        weight = 1.0 if entry.weight is None else float(entry.weight)
        weighted_sum += entry.total * weight
        weight_sum += weight
    if weight_sum == 0:
        raise InvalidConfigurationError("Period weights add up to zero; weighted average is undefined.")
    return weighted_sum / weight_sum


def progressive_average(entries, weights=None):
    if weights is None:
        weights = getattr(settings, "RESULTS_PROGRESSIVE_WEIGHTS", [30, 30, 40])
    if not weights:
        raise InvalidConfigurationError("Progressive average needs at least one term weight.")

    weighted_sum = 0.0
    weight_sum = 0.0
    for entry in entries:
        # order is 1-based; periods past the end reuse the last weight
        index = min(max(int(entry.order or 1), 1), len(weights)) - 1
        weight = float(weights[index])
        weighted_sum += entry.total * weight
        weight_sum += weight
    if weight_sum == 0:
        raise InvalidConfigurationError("Progressive weights add up to zero for the recorded periods.")
    return weighted_sum / weight_sum


CUMULATIVE_METHODS = {
    ResultConfiguration.SIMPLE_AVERAGE: simple_average,
    ResultConfiguration.WEIGHTED_AVERAGE: weighted_average,
    ResultConfiguration.PROGRESSIVE_AVERAGE: progressive_average,
}


def compute_cumulative_average(method, current, others, enabled=True, progressive_weights=None):
    """
    Cumulative figure for ``current`` (a PeriodTotal) given the totals of
    the other periods of the same session.

    Disabled cumulation, or no other periods, yields the current total.
    """
    others = list(others)
    if not enabled or not others:
        return float(current.total)

    if method not in CUMULATIVE_METHODS:
        raise InvalidConfigurationError(f"Unknown cumulative method '{method}'.")

    entries = others + [current]
    if method == ResultConfiguration.PROGRESSIVE_AVERAGE:
        return progressive_average(entries, progressive_weights)
    return CUMULATIVE_METHODS[method](entries)


def period_total(total, period):
    return PeriodTotal(total=total, weight=period.weight, order=period.order)


def cumulative_for(configuration, student, subject, period, total, published_only=False):
    """
    Cumulative average for a (student, subject) in ``period`` with the given
    total, reading the student's other results for the same session.
    Report cards pass ``published_only`` so unpublished scores stay hidden.
    """
    others = (
        Result.objects
        .filter(
            student=student,
            subject=subject,
            academic_session=configuration.academic_session,
        )
        .exclude(period=period)
        .select_related("period")
    )
    if published_only:
        others = others.filter(published=True)
    return compute_cumulative_average(
        configuration.cumulative_method,
        period_total(total, period),
        [period_total(r.total, r.period) for r in others],
        enabled=configuration.cumulative_enabled,
        progressive_weights=configuration.progressive_weights or None,
    )
