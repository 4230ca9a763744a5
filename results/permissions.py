"""
Access rules for entering results and reading report cards.

Identity comes from Django auth; these checks only look at the caller's
role, school and teaching assignments.
"""
from accounts.models import User
from teachers.models import TeacherProfile
from .exceptions import PermissionDeniedError


def teaches_in_class(user, school_class, subject=None):
    """True when ``user`` has a teacher profile that teaches in ``school_class``."""
    if user.role != User.Role.TEACHER:
        return False
    try:
        profile = user.teacher_profile
    except TeacherProfile.DoesNotExist:
        return False
    return profile.teaches(school_class, subject)


def check_can_submit(user, student, school_class, subject):
    if user.is_admin_of(student.school):
        return
    if school_class is not None and teaches_in_class(user, school_class, subject):
        return
    raise PermissionDeniedError(
        f"You are not assigned to {subject.name} or to the class of {student.full_name}."
    )


def check_can_publish(user, school):
    if not user.is_admin_of(school):
        raise PermissionDeniedError("Only school administrators can publish results.")


def check_can_view_report(user, student, school_class=None):
    if user.is_admin_of(student.school):
        return
    if student.user_id and student.user_id == user.pk:
        return
    if user.role == User.Role.PARENT and student.guardians.filter(pk=user.pk).exists():
        return
    if school_class is not None and teaches_in_class(user, school_class):
        return
    raise PermissionDeniedError("You are not allowed to view this student's report card.")
