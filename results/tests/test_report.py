from django.test import TestCase

from academics.models import StudentAttendance, get_enrollment
from accounts.models import User
from results.exceptions import (
    ConfigurationNotFoundError, NoPublishedResultsError, PermissionDeniedError
)
from results.models import ResultConfiguration, ResultTemplate
from results.report import (
    build_render_data, generate_report_card, preview_template, published_results, report_filename
)
from results.ranking import get_ranking_policy
from results.services import submit_result
from schools.models import School
from .helpers import ResultFixtureMixin, make_result, make_student, make_user

VALID_TEMPLATE = {
    "canvasSize": {"width": 794, "height": 1123},
    "elements": [
        {"type": "shape", "x": 0, "y": 0, "width": 794, "height": 90, "style": {"backgroundColor": "#1e3a8a"}},
        {"type": "dynamic", "x": 40, "y": 30, "width": 700, "height": 30,
         "style": {"fontSize": 22, "fontWeight": "bold", "color": "#ffffff", "textAlign": "center"},
         "metadata": {"field": "school_name"}},
        {"type": "dynamic", "x": 40, "y": 120, "width": 300, "height": 20, "metadata": {"field": "student_name"}},
        {"type": "table", "x": 40, "y": 160, "width": 700, "height": 200,
         "metadata": {"tableType": "subjects", "rows": 4, "cols": 6,
                      "headers": ["Subject", "CA1", "CA2", "Exam", "Total", "Grade"]}},
    ],
}


class ReportCardTests(ResultFixtureMixin, TestCase):

    def publish_scores(self):
        submit_result(self.admin, self.submission((20, 20, 55), teacher_comment="Keep it up"))
        submit_result(self.admin, self.submission((15, 10, 50), subject=self.english))
        self.student.results.update(published=True)

    def test_fallback_layout_without_template(self):
        self.publish_scores()
        report = generate_report_card(self.admin, self.student, self.session, self.first_term)

        self.assertTrue(report.content.startswith(b"%PDF"))
        self.assertTrue(report.used_fallback)
        self.assertEqual(report.filename, "Bright_Future_Academy_Ada_Obi_Report.pdf")

    def test_uses_resolved_template(self):
        self.publish_scores()
        ResultTemplate.objects.create(school=self.school, name="Junior", level=self.level, content=VALID_TEMPLATE)

        report = generate_report_card(self.admin, self.student, self.session, self.first_term)
        self.assertFalse(report.used_fallback)
        self.assertTrue(report.content.startswith(b"%PDF"))

    def test_broken_template_falls_back(self):
        self.publish_scores()
        content = {"elements": VALID_TEMPLATE["elements"] + [
            {"type": "dynamic", "x": 10, "y": 10, "width": 100, "height": 20, "metadata": {"field": "shoe_size"}}
        ]}
        ResultTemplate.objects.create(school=self.school, name="Broken", is_default=True, content=content)

        report = generate_report_card(self.admin, self.student, self.session, self.first_term)
        self.assertTrue(report.used_fallback)
        self.assertTrue(report.content.startswith(b"%PDF"))
        self.assertGreater(len(report.content), 1000)

    def test_unpublished_results_are_not_reported(self):
        submit_result(self.admin, self.submission())
        with self.assertRaises(NoPublishedResultsError) as ctx:
            generate_report_card(self.admin, self.student, self.session, self.first_term)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_missing_configuration(self):
        self.publish_scores()
        ResultConfiguration.objects.filter(pk=self.config.pk).update(school=School.objects.create(name="Elsewhere College"))
        with self.assertRaises(ConfigurationNotFoundError):
            generate_report_card(self.admin, self.student, self.session, self.first_term)

    def test_access(self):
        self.publish_scores()
        parent = make_user("parent", User.Role.PARENT, self.school)
        self.student.guardians.add(parent)

        for user in (self.student.user, parent, self.teacher_user):
            report = generate_report_card(user, self.student, self.session, self.first_term)
            self.assertTrue(report.content)

        stranger_parent = make_user("stranger", User.Role.PARENT, self.school)
        for user in (stranger_parent, self.other_teacher_user):
            with self.assertRaises(PermissionDeniedError):
                generate_report_card(user, self.student, self.session, self.first_term)

    def test_report_filename_replaces_whitespace(self):
        self.assertEqual(report_filename(self.school, self.student), "Bright_Future_Academy_Ada_Obi_Report.pdf")


class BuildRenderDataTests(ResultFixtureMixin, TestCase):

    def test_summary_ranking_and_attendance(self):
        classmate = make_student(self.school, "BFA/002", "Bola")
        self.enroll(classmate)
        submit_result(self.admin, self.submission((20, 20, 55)))
        submit_result(self.admin, self.submission((15, 10, 50), subject=self.english))
        submit_result(self.admin, self.submission((20, 20, 58), student=classmate))
        self.student.results.update(published=True)
        classmate.results.update(published=True)
        StudentAttendance.objects.create(
            student=self.student, academic_session=self.session, period=self.first_term,
            times_present=50, times_school_opened=60,
        )

        results = list(self.student.results.select_related("subject").order_by("subject__name"))
        data = build_render_data(
            self.student, self.session, self.first_term, self.config, results,
            get_enrollment(self.student, self.session), get_ranking_policy(),
        )

        self.assertEqual(data.summary["total_score"], 170)
        self.assertEqual(data.summary["average"], 85.0)
        self.assertEqual(data.summary["overall_grade"], "A")
        self.assertEqual(data.summary["position"], 2)
        self.assertEqual(data.summary["students_in_class"], 2)
        self.assertEqual(data.summary["total_obtainable"], 200)
        self.assertEqual(data.component_names, ["CA1", "CA2", "Exam"])
        self.assertEqual(data.attendance["days_absent"], 10)
        self.assertEqual(data.class_info["name"], "JSS2")

        maths = next(row for row in data.subjects if row["subject"] == "Mathematics")
        self.assertEqual(maths["components"], [("CA1", 20), ("CA2", 20), ("Exam", 55)])
        self.assertEqual(maths["position"], 2)
        self.assertEqual(maths["highest"], 98)
        self.assertEqual(maths["cumulative_average"], 95)

    def render_data(self, period):
        results = list(published_results(self.student, self.session, period))
        return build_render_data(self.student, self.session, period, self.config, results)

    def test_unpublished_results_do_not_feed_cumulative_figures(self):
        make_result(self.student, self.maths, self.first_term, 90)
        make_result(self.student, self.english, self.first_term, 60)
        make_result(self.student, self.maths, self.second_term, 10, published=False)
        make_result(self.student, self.english, self.third_term, 70)

        first = self.render_data(self.first_term)
        maths = next(row for row in first.subjects if row["subject"] == "Mathematics")
        self.assertEqual(maths["cumulative_average"], 90)

        third = self.render_data(self.third_term)
        self.assertEqual(third.cumulative["previous_total"], 150)
        self.assertEqual(third.cumulative["term_count"], 2)
        self.assertEqual(third.subjects[0]["cumulative_average"], 65)


class PreviewTemplateTests(ResultFixtureMixin, TestCase):

    def test_preview_renders_sample_data(self):
        outcome = preview_template(self.school, VALID_TEMPLATE)
        self.assertTrue(outcome.ok)
        self.assertTrue(outcome.content.startswith(b"%PDF"))

    def test_preview_reports_template_errors(self):
        outcome = preview_template(self.school, {"elements": [{"type": "dynamic", "metadata": {"field": "nope"}}]})
        self.assertFalse(outcome.ok)
        self.assertIn("nope", outcome.error.message)
