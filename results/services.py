"""
Result aggregation: turning submitted component scores into stored results.

A submission replaces the component scores of its result wholesale and
recomputes total, grade, remark and cumulative average in the same
transaction, so a result is never stored half-updated.
"""
import logging
import math
from collections import namedtuple

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from academics.models import ClassEnrollment, Subject, get_enrollment
from schools.models import AcademicSession
from students.models import Student
from .cumulative import cumulative_for
from .exceptions import (
    InvalidSubmissionError, NothingToPublishError, PeriodNotFoundError, ResultError
)
from .grading import resolve_grade
from .models import ComponentScore, Result, ResultPeriod, ResultPublication
from .permissions import check_can_publish, check_can_submit
from .signals import results_published

logger = logging.getLogger(__name__)

SubmissionOutcome = namedtuple("SubmissionOutcome", ["result", "created"])


class ResultSubmission:
    """One student's scores for one subject in one period."""

    def __init__(self, student_id, subject_id, period_id, session_id, component_scores,
                 affective_traits=None, psychomotor_skills=None, custom_fields=None,
                 teacher_comment=None, admin_comment=None):
        self.student_id = student_id
        self.subject_id = subject_id
        self.period_id = period_id
        self.session_id = session_id
        self.component_scores = component_scores
        self.affective_traits = affective_traits
        self.psychomotor_skills = psychomotor_skills
        self.custom_fields = custom_fields
        self.teacher_comment = teacher_comment
        self.admin_comment = admin_comment

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise InvalidSubmissionError("Each result must be a JSON object.")

        missing = [k for k in ("student_id", "subject_id", "period_id", "session_id") if not data.get(k)]
        if missing:
            raise InvalidSubmissionError(f"Missing required fields: {', '.join(missing)}")

        raw_scores = data.get("component_scores")
        if not isinstance(raw_scores, list) or not raw_scores:
            raise InvalidSubmissionError("component_scores must be a non-empty list.")

        ids = {}
        for key in ("student_id", "subject_id", "period_id", "session_id"):
            try:
                ids[key] = int(data[key])
            except (TypeError, ValueError):
                raise InvalidSubmissionError(f"{key} must be an integer, got {data[key]!r}.")

        component_scores = []
        for item in raw_scores:
            try:
                score = float(item["score"])
                component_scores.append((int(item["component_id"]), score))
            except (KeyError, TypeError, ValueError):
                raise InvalidSubmissionError(f"Invalid component score: {item!r}")
            if not math.isfinite(score):
                raise InvalidSubmissionError(f"Score must be a finite number: {item!r}")

        for key in ("affective_traits", "psychomotor_skills", "custom_fields"):
            if data.get(key) is not None and not isinstance(data[key], dict):
                raise InvalidSubmissionError(f"{key} must be an object.")

        return cls(
            **ids,
            component_scores=component_scores,
            affective_traits=data.get("affective_traits"),
            psychomotor_skills=data.get("psychomotor_skills"),
            custom_fields=data.get("custom_fields"),
            teacher_comment=data.get("teacher_comment"),
            admin_comment=data.get("admin_comment"),
        )


def get_period(period_id, academic_session):
    """The period with ``period_id`` in the session's result configuration."""
    period = (
        ResultPeriod.objects
        .select_related("configuration", "configuration__academic_session")
        .filter(pk=period_id, configuration__academic_session=academic_session)
        .first()
    )
    if period is None:
        raise PeriodNotFoundError(
            f"Period {period_id} is not configured for session {academic_session.name}."
        )
    return period


def _validate_scores(configuration, component_scores):
    components = {c.pk: c for c in configuration.components.all()}
    validated = []
    seen = set()
    for component_id, score in component_scores:
        component = components.get(component_id)
        if component is None:
            raise InvalidSubmissionError(
                f"Assessment component {component_id} is not part of this session's configuration."
            )
        if component_id in seen:
            raise InvalidSubmissionError(f"{component.name} was submitted more than once.")
        if not math.isfinite(score) or score < 0 or score > component.max_score:
            raise InvalidSubmissionError(
                f"{component.name} must be between 0 and {component.max_score:g}, got {score:g}."
            )
        seen.add(component_id)
        validated.append((component, score))
    return validated


def _refresh_sibling_cumulatives(configuration, result):
    """Other periods' cumulative averages depend on this result's total."""
    if not configuration.cumulative_enabled:
        return
    siblings = (
        Result.objects
        .select_for_update()
        .filter(
            student_id=result.student_id,
            subject_id=result.subject_id,
            academic_session_id=result.academic_session_id,
        )
        .exclude(pk=result.pk)
        .select_related("period")
    )
    for sibling in siblings:
        value = cumulative_for(configuration, sibling.student, sibling.subject, sibling.period, sibling.total)
        if value != sibling.cumulative_average:
            sibling.cumulative_average = value
            sibling.save(update_fields=["cumulative_average", "updated_at"])


def submit_result(user, submission):
    """
    Create or replace the result identified by (student, subject, period,
    session). Returns a SubmissionOutcome.

    Raises PeriodNotFoundError, PermissionDeniedError, InvalidSubmissionError
    or NoMatchingGradeError; nothing is written when any of them is raised.
    """
    try:
        student = Student.objects.select_related("school").get(pk=submission.student_id)
        academic_session = AcademicSession.objects.get(pk=submission.session_id, school=student.school)
        subject = Subject.objects.get(pk=submission.subject_id, school=student.school)
    except (Student.DoesNotExist, AcademicSession.DoesNotExist, Subject.DoesNotExist, ValueError, TypeError) as e:
        raise InvalidSubmissionError(f"Invalid data: {e}")

    try:
        period = get_period(int(submission.period_id), academic_session)
    except (TypeError, ValueError):
        raise InvalidSubmissionError(f"Invalid period id: {submission.period_id!r}")
    configuration = period.configuration

    enrollment = get_enrollment(student, academic_session)
    check_can_submit(user, student, enrollment.school_class if enrollment else None, subject)

    scores = _validate_scores(configuration, submission.component_scores)
    # Scores and grade bounds carry two decimals
    total = round(math.fsum(score for _, score in scores), 2)
    grade = resolve_grade(total, configuration.grading_scale.all())
    cumulative_average = cumulative_for(configuration, student, subject, period, total)

    with transaction.atomic():
        result = (
            Result.objects
            .select_for_update()
            .filter(student=student, subject=subject, period=period, academic_session=academic_session)
            .first()
        )
        created = result is None
        if created:
            result = Result(student=student, subject=subject, period=period, academic_session=academic_session)

        result.total = total
        result.grade = grade.grade
        result.remark = grade.remark
        result.cumulative_average = cumulative_average
        for field in ("affective_traits", "psychomotor_skills", "custom_fields", "teacher_comment", "admin_comment"):
            value = getattr(submission, field)
            if value is not None:
                setattr(result, field, value)
        result.save()

        result.component_scores.all().delete()
        ComponentScore.objects.bulk_create([
            ComponentScore(result=result, component=component, score=score)
            for component, score in scores
        ])

        _refresh_sibling_cumulatives(configuration, result)

    logger.info(
        "%s result %s: student=%s subject=%s period=%s total=%g grade=%s",
        "Created" if created else "Updated", result.pk, student.pk, subject.pk, period.pk, total, result.grade,
    )
    return SubmissionOutcome(result, created)


class BatchReport:
    """Per-item outcome of a batch submission."""

    def __init__(self):
        self.created_count = 0
        self.updated_count = 0
        self.failures = []

    @property
    def saved_count(self):
        return self.created_count + self.updated_count

    def add_success(self, outcome):
        if outcome.created:
            self.created_count += 1
        else:
            self.updated_count += 1

    def add_failure(self, index, item, error):
        get = item.get if isinstance(item, dict) else lambda key: getattr(item, key, None)
        self.failures.append({
            "index": index,
            "student_id": get("student_id"),
            "subject_id": get("subject_id"),
            "error": getattr(error, "message", None) or str(error),
        })

    def as_dict(self):
        return {
            "saved_count": self.saved_count,
            "created_count": self.created_count,
            "updated_count": self.updated_count,
            "failed_count": len(self.failures),
            "failures": self.failures,
        }


def submit_results_batch(user, items):
    """
    Apply each item (a ResultSubmission or its dict form) as its own atomic
    unit, in order. Items that fail are reported; the rest stay applied.
    """
    report = BatchReport()
    for index, item in enumerate(items):
        try:
            submission = item if isinstance(item, ResultSubmission) else ResultSubmission.from_dict(item)
            outcome = submit_result(user, submission)
        except (ResultError, ObjectDoesNotExist, ValidationError, DatabaseError) as e:
            logger.warning("Batch item %s rejected: %s", index, e)
            report.add_failure(index, item, e)
            continue
        report.add_success(outcome)

    logger.info("Batch saved %s of %s results", report.saved_count, len(items))
    return report


def _publication_scope(academic_session, period, school_class=None):
    results = Result.objects.filter(academic_session=academic_session, period=period)
    if school_class is not None:
        results = results.filter(
            student__enrollments__school_class=school_class,
            student__enrollments__academic_session=academic_session,
            student__enrollments__status=ClassEnrollment.ACTIVE,
        )
    return results


def publish_results(user, academic_session, period, school_class=None):
    """
    Mark unpublished results in scope as published and record the
    publication. Only school administrators may publish.
    """
    check_can_publish(user, academic_session.school)

    pending = _publication_scope(academic_session, period, school_class).filter(published=False)
    with transaction.atomic():
        count = pending.update(published=True, published_at=timezone.now(), published_by=user)
        if count == 0:
            raise NothingToPublishError()
        publication = ResultPublication.objects.create(
            school=academic_session.school,
            academic_session=academic_session,
            period=period,
            school_class=school_class,
            published_by=user,
            total_results=count,
        )

    logger.info("Published %s results for %s / %s", count, academic_session.name, period.name)
    results_published.send(sender=ResultPublication, publication=publication)
    return publication


def unpublish_results(user, academic_session, period, school_class=None):
    check_can_publish(user, academic_session.school)
    count = (
        _publication_scope(academic_session, period, school_class)
        .filter(published=True)
        .update(published=False, published_at=None, published_by=None)
    )
    logger.info("Unpublished %s results for %s / %s", count, academic_session.name, period.name)
    return count
