"""
Registry of the dynamic fields a report template can bind to.

Each field has a key (stored in the template element's ``metadata.field``),
a label and category for the template editor, and a resolver that turns
RenderData into display text. Image fields resolve to a file path instead.
"""
from collections import namedtuple

from results.exceptions import TemplateRenderError

DynamicField = namedtuple("DynamicField", ["key", "label", "category", "resolve"])

FIELD_REGISTRY = {}
IMAGE_FIELDS = {}

CATEGORIES = ("student", "school", "period", "result", "attendance", "computed", "custom")


def get_ordinal_suffix(n):
    """Return ordinal suffix for a number (1st, 2nd, 3rd, etc.)"""
    if 11 <= n % 100 <= 13:
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')


def format_position(position):
    """Format position with ordinal suffix"""
    if position is None:
        return 'N/A'
    return f"{position}{get_ordinal_suffix(position)}"


def format_number(value):
    if value is None or value == "":
        return "N/A"
    try:
        return f"{float(value):g}"
    except (TypeError, ValueError):
        return str(value)


def format_percentage(value):
    if value is None or value == "":
        return "N/A"
    return f"{float(value):.2f}%"


def register(key, label, category):
    def decorator(func):
        FIELD_REGISTRY[key] = DynamicField(key, label, category, func)
        return func
    return decorator


def register_value(key, label, category, getter, default="N/A"):
    """Register a field whose text is a single lookup on RenderData."""
    def resolve(data):
        value = getter(data)
        return default if value in (None, "") else str(value)
    FIELD_REGISTRY[key] = DynamicField(key, label, category, resolve)


def register_image(key, label, category, getter):
    IMAGE_FIELDS[key] = DynamicField(key, label, category, getter)


def fields_by_category(category):
    return [f for f in FIELD_REGISTRY.values() if f.category == category]


def resolve_field(key, data):
    """Display text for ``key``. Unknown keys are a template error."""
    field = FIELD_REGISTRY.get(key)
    if field is None:
        raise TemplateRenderError(f"Unknown dynamic field '{key}'.")
    return field.resolve(data)


def resolve_image(key, data):
    """File path for image field ``key``, or None when the image is not set."""
    field = IMAGE_FIELDS.get(key)
    if field is None:
        raise TemplateRenderError(f"Unknown image field '{key}'.")
    return field.resolve(data)


def grading_scale_lines(data):
    return [
        f"{row['grade']}: {format_number(row['min_score'])}-{format_number(row['max_score'])}% ({row['remark']})"
        for row in data.grading_scale
    ]


# Student
register_value("student_name", "Student Name", "student", lambda d: d.student.get("name"))
register_value("admission_number", "Admission Number", "student", lambda d: d.student.get("admission_number"))
register_value("gender", "Gender", "student", lambda d: d.student.get("gender"))
register_value("date_of_birth", "Date of Birth", "student", lambda d: d.student.get("date_of_birth"))
register_value("age", "Age", "student", lambda d: d.student.get("age"))
register_image("student_photo", "Student Photo", "student", lambda d: d.student.get("photo_path"))

# School
register_value("school_name", "School Name", "school", lambda d: d.school.get("name"), default="")
register_value("school_address", "School Address", "school", lambda d: d.school.get("address"), default="")
register_value("school_motto", "School Motto", "school", lambda d: d.school.get("motto"), default="")
register_value("school_phone", "School Phone", "school", lambda d: d.school.get("phone"), default="")
register_value("school_email", "School Email", "school", lambda d: d.school.get("email"), default="")
register_value("school_website", "School Website", "school", lambda d: d.school.get("website"), default="")
register_image("school_logo", "School Logo", "school", lambda d: d.school.get("logo_path"))
register_image("school_stamp", "School Stamp", "school", lambda d: d.school.get("stamp_path"))

# Period / class
register_value("academic_session", "Academic Session", "period", lambda d: d.session_name)
register_value("term_name", "Term Name", "period", lambda d: d.period_name)
register_value("class_name", "Class Name", "period", lambda d: d.class_info.get("name"))
register_value("class_section", "Class Section/Arm", "period", lambda d: d.class_info.get("section"))
register_value("class_teacher", "Class Teacher", "period", lambda d: d.class_info.get("teacher"))
register_value("students_in_class", "Number in Class", "period", lambda d: d.summary.get("students_in_class"))

# Values entered per result in custom_fields
for _key, _label in (
    ("vacation_date", "Vacation Date"),
    ("resumption_date", "Resumption Date"),
    ("next_term_date", "Next Term Date"),
    ("result_status", "Result Status"),
):
    register_value(_key, _label, "custom", lambda d, k=_key: d.custom_fields.get(k), default="")


# Result
@register("total_score", "Total Score", "result")
def total_score(data):
    return format_number(data.summary.get("total_score", 0))


@register("total_obtainable", "Total Obtainable", "result")
def total_obtainable(data):
    return format_number(data.summary.get("total_obtainable"))


@register("average_score", "Average Score", "result")
def average_score(data):
    return format_percentage(data.summary.get("average"))


register_value("overall_grade", "Overall Grade", "result", lambda d: d.summary.get("overall_grade"))


@register("position", "Class Position", "result")
def position(data):
    return format_position(data.summary.get("position"))


register_value("teacher_comment", "Teacher's Comment", "result", lambda d: d.comments.get("teacher"), default="")
register_value("admin_comment", "Principal's Comment", "result", lambda d: d.comments.get("admin"), default="")


@register("grading_scale", "Grading Scale", "result")
def grading_scale(data):
    return ", ".join(
        f"{row['grade']}: {format_number(row['min_score'])}-{format_number(row['max_score'])}"
        for row in data.grading_scale
    )


# Attendance
register_value("days_present", "Days Present", "attendance", lambda d: d.attendance.get("days_present"))
register_value("days_absent", "Days Absent", "attendance", lambda d: d.attendance.get("days_absent"))
register_value("total_days", "Total Days in Term", "attendance", lambda d: d.attendance.get("total_days"))


@register("attendance_percentage", "Attendance Percentage", "attendance")
def attendance_percentage(data):
    return format_percentage(data.attendance.get("percentage"))


# Computed
@register("cumulative_total", "Cumulative Total", "computed")
def cumulative_total(data):
    previous = data.cumulative.get("previous_total") or 0
    return format_number(previous + (data.summary.get("total_score") or 0))


@register("cumulative_average", "Cumulative Average", "computed")
def cumulative_average(data):
    return format_percentage(data.cumulative.get("average"))


@register("term_count", "Term Count", "computed")
def term_count(data):
    return str(data.cumulative.get("term_count") or 1)
