from django.db import models
from django.core.exceptions import ValidationError
from schools.models import School, AcademicSession, SchoolLevel
from teachers.models import TeacherProfile


# -------------------------
# School Class
# -------------------------
class SchoolClass(models.Model):
    school = models.ForeignKey(
        School,
        on_delete=models.CASCADE,
        related_name="classes"
    )
    name = models.CharField(max_length=50)  # e.g., JSS1, SS3
    section = models.CharField(max_length=20, blank=True, help_text="Arm of the class, e.g. A, B, Gold")
    level = models.ForeignKey(
        SchoolLevel,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="classes"
    )
    form_teacher = models.ForeignKey(
        TeacherProfile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="form_classes",
        help_text="Class teacher named on report cards; may enter results for every subject in the class"
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        unique_together = ("school", "name", "section")
        ordering = ["name", "section"]

    def clean(self):
        if self.level_id and self.level.school_id != self.school_id:
            raise ValidationError("Class level must belong to the same school as the class.")

    def __str__(self):
        return f"{self.school.name} - {self.name}{self.section}"


# -------------------------
# Subject
# -------------------------
class Subject(models.Model):
    school = models.ForeignKey(
        School,
        on_delete=models.CASCADE,
        related_name="subjects"
    )
    name = models.CharField(max_length=100)
    code = models.CharField(max_length=20, blank=True, null=True)

    class Meta:
        unique_together = ("school", "name")
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.school.name})"


# -------------------------
# ClassSubject (Teacher Assignment)
# -------------------------
class ClassSubject(models.Model):
    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.CASCADE,
        related_name="class_subjects"
    )
    subject = models.ForeignKey(
        Subject,
        on_delete=models.CASCADE,
        related_name="class_subjects"
    )
    teacher = models.ForeignKey(
        TeacherProfile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="class_subjects"
    )

    class Meta:
        unique_together = ("school_class", "subject")

    def clean(self):
        if self.teacher and self.teacher.school != self.school_class.school:
            raise ValidationError(
                "Assigned teacher must belong to the same school as the class."
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.school_class} - {self.subject.name}"


# -------------------------
# Class Enrollment (per session)
# -------------------------
class ClassEnrollment(models.Model):
    """
    A student's membership of a class for one academic session.
    Class population on report cards counts these rows.
    """
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    STATUS_CHOICES = (
        (ACTIVE, "Active"),
        (INACTIVE, "Inactive"),
    )

    student = models.ForeignKey(
        "students.Student",
        on_delete=models.CASCADE,
        related_name="enrollments"
    )
    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.CASCADE,
        related_name="enrollments"
    )
    academic_session = models.ForeignKey(
        AcademicSession,
        on_delete=models.CASCADE,
        related_name="enrollments"
    )
    roll_number = models.CharField(max_length=20, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=ACTIVE)
    enrolled_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("student", "academic_session")
        ordering = ["id"]

    def clean(self):
        if self.school_class.school_id != self.student.school_id:
            raise ValidationError("Student and class must belong to the same school.")

    def __str__(self):
        return f"{self.student} in {self.school_class.name} ({self.academic_session.name})"


def get_enrollment(student, academic_session):
    """Return the student's active enrollment for the session, or None."""
    return (
        ClassEnrollment.objects
        .select_related("school_class", "school_class__level", "school_class__form_teacher__user")
        .filter(student=student, academic_session=academic_session, status=ClassEnrollment.ACTIVE)
        .first()
    )


# -------------------------
# Student Attendance
# -------------------------
class StudentAttendance(models.Model):
    """Track student attendance per grading period"""
    student = models.ForeignKey(
        "students.Student",
        on_delete=models.CASCADE,
        related_name="attendance_records"
    )
    academic_session = models.ForeignKey(
        AcademicSession,
        on_delete=models.CASCADE
    )
    period = models.ForeignKey(
        "results.ResultPeriod",
        on_delete=models.CASCADE,
        related_name="attendance_records"
    )

    # Attendance counts
    times_present = models.PositiveIntegerField(default=0)
    times_school_opened = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = (
            "student",
            "academic_session",
            "period",
        )

    def __str__(self):
        return f"{self.student} - {self.period} ({self.times_present}/{self.times_school_opened})"

    @property
    def times_absent(self):
        return max(self.times_school_opened - self.times_present, 0)

    @property
    def attendance_percentage(self):
        if self.times_school_opened > 0:
            return round((self.times_present / self.times_school_opened) * 100, 1)
        return 0
