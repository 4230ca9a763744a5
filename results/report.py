"""
Report card generation: gathers a student's published results, ranking,
cumulative figures and attendance into RenderData, picks the template and
renders the PDF.
"""
import logging
import re
from collections import namedtuple

from academics.models import StudentAttendance, get_enrollment
from portal.render_data import RenderData
from portal.report_pdf import render_report, render_template
from .cumulative import cumulative_for
from .exceptions import ConfigurationNotFoundError, NoMatchingGradeError, NoPublishedResultsError, PeriodNotFoundError
from .grading import resolve_grade
from .models import Result, ResultConfiguration
from .permissions import check_can_view_report
from .ranking import ClassPosition, compute_class_position, compute_subject_positions, get_ranking_policy
from .templates import resolve_template

logger = logging.getLogger(__name__)

ReportCard = namedtuple("ReportCard", ["content", "filename", "used_fallback"])


def _file_path(field):
    if not field:
        return None
    try:
        return field.path
    except (NotImplementedError, ValueError):
        return None


def school_block(school):
    return {
        "name": school.name,
        "address": school.address,
        "motto": school.motto or "",
        "phone": school.phone,
        "email": school.email,
        "website": school.website,
        "logo_path": _file_path(school.logo),
        "stamp_path": _file_path(school.stamp),
        "primary_color": school.primary_color,
    }


def report_filename(school, student):
    return re.sub(r"\s+", "_", f"{school.name}_{student.full_name}_Report.pdf")


def published_results(student, academic_session, period):
    return (
        Result.objects
        .filter(student=student, academic_session=academic_session, period=period, published=True)
        .select_related("subject")
        .prefetch_related("component_scores__component")
        .order_by("subject__name")
    )


def _first_value(results, field):
    for result in results:
        value = getattr(result, field)
        if value:
            return value
    return None


def build_render_data(student, academic_session, period, configuration, results, enrollment=None, policy=None):
    """Assemble RenderData for one student's report card."""
    school_class = enrollment.school_class if enrollment else None

    if school_class is not None:
        class_position = compute_class_position(school_class, academic_session, period, student, policy)
        subject_positions = compute_subject_positions(school_class, academic_session, period, student, policy)
    else:
        class_position = ClassPosition(None, 0, None, [])
        subject_positions = {}

    components = list(configuration.components.all())
    scale = list(configuration.grading_scale.all())

    subjects = []
    for result in results:
        stats = subject_positions.get(result.subject_id)
        subjects.append({
            "subject": result.subject.name,
            "total": result.total,
            "grade": result.grade,
            "remark": result.remark,
            "components": [(cs.component.name, cs.score) for cs in result.component_scores.all()],
            "cumulative_average": (
                cumulative_for(configuration, student, result.subject, period, result.total, published_only=True)
                if configuration.cumulative_enabled else None
            ),
            "position": stats.position if stats else None,
            "highest": stats.highest if stats else None,
        })

    total_score = sum(row["total"] for row in subjects)
    average = round(total_score / len(subjects), 2) if subjects else 0
    try:
        overall_grade = resolve_grade(average, scale).grade
    except NoMatchingGradeError:
        logger.warning("Average %s of student %s matches no grade", average, student.pk)
        overall_grade = "N/A"

    cumulative = {}
    if configuration.cumulative_enabled:
        previous = Result.objects.filter(
            student=student,
            academic_session=academic_session,
            period__configuration=configuration,
            period__order__lt=period.order,
            published=True,
        )
        averages = [row["cumulative_average"] for row in subjects]
        cumulative = {
            "previous_total": sum(previous.values_list("total", flat=True)),
            "term_count": previous.order_by().values("period").distinct().count() + 1,
            "average": round(sum(averages) / len(averages), 2) if averages else None,
        }

    attendance = {}
    record = StudentAttendance.objects.filter(student=student, academic_session=academic_session, period=period).first()
    if record is not None:
        attendance = {
            "days_present": record.times_present,
            "days_absent": record.times_absent,
            "total_days": record.times_school_opened,
            "percentage": record.attendance_percentage,
        }

    custom_fields = {}
    for result in results:
        for key, value in (result.custom_fields or {}).items():
            custom_fields.setdefault(key, value)

    form_teacher = school_class.form_teacher if school_class else None
    return RenderData(
        student={
            "name": student.full_name,
            "admission_number": student.admission_number,
            "gender": student.get_gender_display(),
            "date_of_birth": student.date_of_birth.strftime("%d %B, %Y") if student.date_of_birth else None,
            "age": student.age,
            "photo_path": _file_path(student.photo),
        },
        school=school_block(student.school),
        class_info={
            "name": school_class.name if school_class else None,
            "section": school_class.section if school_class else None,
            "teacher": form_teacher.full_name if form_teacher else None,
        },
        session_name=academic_session.name,
        period_name=period.name,
        subjects=subjects,
        component_names=[c.name for c in components],
        grading_scale=[
            {"grade": e.grade, "min_score": e.min_score, "max_score": e.max_score, "remark": e.remark}
            for e in scale
        ],
        summary={
            "total_score": total_score,
            "total_obtainable": sum(c.max_score for c in components) * len(subjects),
            "average": average,
            "overall_grade": overall_grade,
            "position": class_position.position,
            "students_in_class": class_position.students_in_class,
        },
        cumulative=cumulative,
        attendance=attendance,
        comments={
            "teacher": _first_value(results, "teacher_comment"),
            "admin": _first_value(results, "admin_comment"),
        },
        affective_traits=_first_value(results, "affective_traits"),
        psychomotor_skills=_first_value(results, "psychomotor_skills"),
        custom_fields=custom_fields,
    )


def generate_report_card(user, student, academic_session, period):
    """
    Render the report card of ``student`` for ``period``.

    Raises PermissionDeniedError, NoPublishedResultsError or
    ConfigurationNotFoundError. Template problems never raise; the built-in
    layout is used instead and ``used_fallback`` is set.
    """
    enrollment = get_enrollment(student, academic_session)
    check_can_view_report(user, student, enrollment.school_class if enrollment else None)

    results = list(published_results(student, academic_session, period))
    if not results:
        raise NoPublishedResultsError()

    configuration = ResultConfiguration.objects.filter(
        school=student.school, academic_session=academic_session
    ).first()
    if configuration is None:
        raise ConfigurationNotFoundError()
    if period.configuration_id != configuration.pk:
        raise PeriodNotFoundError()

    policy = get_ranking_policy(configuration.ranking_policy)
    data = build_render_data(student, academic_session, period, configuration, results, enrollment, policy)

    level = enrollment.school_class.level if enrollment else None
    template = resolve_template(student.school, level, period)
    rendered = render_report(template, data)

    logger.info(
        "Generated report card for student %s (%s, %s)%s",
        student.pk, academic_session.name, period.name, " using fallback layout" if rendered.used_fallback else "",
    )
    return ReportCard(rendered.content, report_filename(student.school, student), rendered.used_fallback)


def preview_template(school, template_content):
    """Draw an editor document with sample data. Returns a TemplateRenderOutcome."""
    return render_template(template_content, RenderData.sample(school_block(school)))
