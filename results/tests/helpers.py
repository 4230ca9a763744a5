"""Shared school, configuration and people for result tests."""
from academics.models import ClassEnrollment, ClassSubject, SchoolClass, Subject
from accounts.models import User
from results.models import (
    AssessmentComponent, GradingScaleEntry, Result, ResultConfiguration, ResultPeriod
)
from results.services import ResultSubmission
from schools.models import AcademicSession, School, SchoolLevel
from students.models import Student
from teachers.models import TeacherProfile

GRADES = [
    ("A", 70, 100, "Excellent"),
    ("B", 60, 69.99, "Very Good"),
    ("C", 50, 59.99, "Credit"),
    ("D", 40, 49.99, "Pass"),
    ("F", 0, 39.99, "Fail"),
]


def make_user(username, role, school=None, **extra):
    return User.objects.create_user(username=username, password="pass1234", role=role, school=school, **extra)


def make_student(school, admission_number, first_name, last_name="Obi", **extra):
    return Student.objects.create(
        school=school,
        admission_number=admission_number,
        first_name=first_name,
        last_name=last_name,
        **extra
    )


def make_result(student, subject, period, total, published=True, **extra):
    return Result.objects.create(
        student=student,
        subject=subject,
        period=period,
        academic_session=period.configuration.academic_session,
        total=total,
        published=published,
        **extra
    )


class ResultFixtureMixin:
    """
    One school with a 2025/2026 session, three terms, CA1/CA2/Exam
    components (20/20/60), an A-F scale and a JSS2 A class.
    The maths teacher is assigned to Mathematics; English has no teacher.
    """

    @classmethod
    def setUpTestData(cls):
        cls.school = School.objects.create(
            name="Bright Future Academy", address="12 Unity Road", motto="Knowledge is light"
        )
        cls.session = AcademicSession.objects.create(school=cls.school, name="2025/2026", is_active=True)
        cls.level = SchoolLevel.objects.create(school=cls.school, name="Junior Secondary", order=1)

        cls.config = ResultConfiguration.objects.create(
            school=cls.school,
            academic_session=cls.session,
            cumulative_enabled=True,
            cumulative_method=ResultConfiguration.SIMPLE_AVERAGE,
        )
        cls.first_term = ResultPeriod.objects.create(configuration=cls.config, name="First Term", order=1)
        cls.second_term = ResultPeriod.objects.create(configuration=cls.config, name="Second Term", order=2)
        cls.third_term = ResultPeriod.objects.create(configuration=cls.config, name="Third Term", order=3)

        cls.ca1 = AssessmentComponent.objects.create(configuration=cls.config, name="CA1", max_score=20, order=1)
        cls.ca2 = AssessmentComponent.objects.create(configuration=cls.config, name="CA2", max_score=20, order=2)
        cls.exam = AssessmentComponent.objects.create(configuration=cls.config, name="Exam", max_score=60, order=3)

        for order, (grade, low, high, remark) in enumerate(GRADES):
            GradingScaleEntry.objects.create(
                configuration=cls.config, grade=grade, min_score=low, max_score=high, remark=remark, order=order
            )

        cls.admin = make_user("schooladmin", User.Role.SCHOOL_ADMIN, cls.school)
        cls.teacher_user = make_user("maths.teacher", User.Role.TEACHER, cls.school, first_name="Grace", last_name="Okoro")
        cls.teacher = TeacherProfile.objects.create(user=cls.teacher_user, school=cls.school, staff_id="T001")
        cls.other_teacher_user = make_user("other.teacher", User.Role.TEACHER, cls.school)
        cls.other_teacher = TeacherProfile.objects.create(user=cls.other_teacher_user, school=cls.school, staff_id="T002")

        cls.school_class = SchoolClass.objects.create(school=cls.school, name="JSS2", section="A", level=cls.level)
        cls.maths = Subject.objects.create(school=cls.school, name="Mathematics")
        cls.english = Subject.objects.create(school=cls.school, name="English Language")
        ClassSubject.objects.create(school_class=cls.school_class, subject=cls.maths, teacher=cls.teacher)
        ClassSubject.objects.create(school_class=cls.school_class, subject=cls.english)

        cls.student = make_student(cls.school, "BFA/001", "Ada")
        cls.enroll(cls.student)

    @classmethod
    def enroll(cls, student, status=ClassEnrollment.ACTIVE):
        return ClassEnrollment.objects.create(
            student=student, school_class=cls.school_class, academic_session=cls.session, status=status
        )

    def scores(self, ca1, ca2, exam):
        return [(self.ca1.pk, ca1), (self.ca2.pk, ca2), (self.exam.pk, exam)]

    def submission(self, scores=(20, 20, 55), student=None, subject=None, period=None, **extra):
        return ResultSubmission(
            student_id=(student or self.student).pk,
            subject_id=(subject or self.maths).pk,
            period_id=(period or self.first_term).pk,
            session_id=self.session.pk,
            component_scores=self.scores(*scores),
            **extra
        )

    def payload(self, scores=(20, 20, 55), student=None, subject=None, period=None):
        """The JSON form of a submission."""
        return {
            "student_id": (student or self.student).pk,
            "subject_id": (subject or self.maths).pk,
            "period_id": (period or self.first_term).pk,
            "session_id": self.session.pk,
            "component_scores": [
                {"component_id": component_id, "score": score}
                for component_id, score in self.scores(*scores)
            ],
        }
