"""
Report template resolution.

A school may author several templates; the one used for a report is the
most specific active match for the student's class level and the period.
"""
import logging

from .models import ResultTemplate

logger = logging.getLogger(__name__)


# Most specific first. Each criteria function returns queryset filter kwargs,
# or None when the tier cannot apply (e.g. the class has no level).
TEMPLATE_TIERS = [
    ("level_and_period", lambda level, period: (
        {"level": level, "period": period} if level is not None and period is not None else None
    )),
    ("level", lambda level, period: {"level": level} if level is not None else None),
    ("period", lambda level, period: {"period": period} if period is not None else None),
    ("default", lambda level, period: {"is_default": True}),
    ("any", lambda level, period: {}),
]


def resolve_template(school, level=None, period=None):
    """
    Return the school's best matching active ResultTemplate, newest first
    within a tier, or None when the school has no active template.
    """
    templates = ResultTemplate.objects.filter(school=school, is_active=True).order_by("-updated_at", "-id")
    for tier, criteria in TEMPLATE_TIERS:
        filters = criteria(level, period)
        if filters is None:
            continue
        template = templates.filter(**filters).first()
        if template is not None:
            logger.info("Using template %s (%s) for %s", template.pk, tier, school.name)
            return template

    logger.info("No active report template for %s", school.name)
    return None
