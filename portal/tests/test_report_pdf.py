from django.test import SimpleTestCase, override_settings
from reportlab.lib.pagesizes import A4, landscape

from portal.dynamic_fields import (
    FIELD_REGISTRY, fields_by_category, format_position, resolve_field, resolve_image
)
from portal.render_data import RenderData
from portal.report_pdf import (
    rating_rows, render_fallback, render_report, render_template, template_pagesize
)
from results.exceptions import TemplateRenderError


def element(kind, **kwargs):
    base = {"type": kind, "x": 40, "y": 40, "width": 300, "height": 40}
    base.update(kwargs)
    return base


class DynamicFieldTests(SimpleTestCase):

    def setUp(self):
        self.data = RenderData.sample({"name": "Bright Future Academy"})

    def test_resolves_student_and_school_fields(self):
        self.assertEqual(resolve_field("student_name", self.data), "John Doe")
        self.assertEqual(resolve_field("school_name", self.data), "Bright Future Academy")
        self.assertEqual(resolve_field("term_name", self.data), "First Term")

    def test_formats_result_fields(self):
        self.assertEqual(resolve_field("position", self.data), "2nd")
        self.assertEqual(resolve_field("total_score", self.data), "255")
        self.assertEqual(resolve_field("average_score", self.data), "85.00%")
        self.assertEqual(resolve_field("cumulative_total", self.data), "997")

    def test_missing_values(self):
        self.data.summary["position"] = None
        self.data.attendance = {}
        self.assertEqual(resolve_field("position", self.data), "N/A")
        self.assertEqual(resolve_field("days_present", self.data), "N/A")

    def test_unknown_field(self):
        with self.assertRaises(TemplateRenderError):
            resolve_field("shoe_size", self.data)
        with self.assertRaises(TemplateRenderError):
            resolve_image("shoe_size", self.data)

    def test_ordinals(self):
        self.assertEqual(
            [format_position(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101)],
            ["1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st"],
        )

    def test_registry_categories(self):
        self.assertIn("grading_scale", FIELD_REGISTRY)
        self.assertIn("days_absent", [f.key for f in fields_by_category("attendance")])


class RenderTemplateTests(SimpleTestCase):

    def setUp(self):
        self.data = RenderData.sample()

    def render(self, elements, **content):
        return render_template({"elements": elements, **content}, self.data)

    def test_draws_every_element_type(self):
        outcome = self.render([
            element("shape", style={"backgroundColor": "#1e3a8a", "borderColor": "#000000", "borderWidth": 1}),
            element("line", style={"borderBottom": "2px solid #ff0000"}),
            element("text", content="Report Sheet\nFirst Term", style={"fontSize": 18, "textAlign": "center"}),
            element("dynamic", metadata={"field": "student_name"}, style={"fontWeight": "bold"}),
            element("dynamic", metadata={"field": "grading_scale", "displayType": "list"}),
            element("image", metadata={"field": "school_logo", "isPlaceholder": True}),
            element("table", height=200, metadata={
                "tableType": "subjects", "rows": 3, "cols": 6,
                "headers": ["Subject", "CA1", "CA2", "Exam", "Total", "Grade"],
                "columnWidths": [3, 1, 1, 1, 1, 1],
            }, style={"altRowColor": "#f5f5f5"}),
            element("table", height=120, metadata={
                "tableType": "affective", "rows": 4, "cols": 2, "headers": ["Trait", "Rating"],
            }),
            element("table", height=120, metadata={
                "tableType": "psychomotor", "rows": 3, "cols": 6,
                "headers": ["Skill", "1", "2", "3", "4", "5"], "skills": ["Handwriting", "Drawing"],
            }),
        ])
        self.assertTrue(outcome.ok, outcome.error)
        self.assertTrue(outcome.content.startswith(b"%PDF"))

    def test_accepts_stored_template_shape(self):
        outcome = render_template({"content": {"elements": [element("text", content="Hi")]}}, self.data)
        self.assertTrue(outcome.ok)

    def test_unknown_dynamic_field_is_typed_failure(self):
        outcome = self.render([element("dynamic", metadata={"field": "shoe_size"})])
        self.assertFalse(outcome.ok)
        self.assertIsNone(outcome.content)
        self.assertIsInstance(outcome.error, TemplateRenderError)
        self.assertIn("shoe_size", outcome.error.message)

    def test_bad_colour(self):
        outcome = self.render([element("shape", style={"backgroundColor": "not-a-colour"})])
        self.assertIsInstance(outcome.error, TemplateRenderError)

    def test_malformed_geometry(self):
        outcome = self.render([element("text", content="Hi", x="left")])
        self.assertIsInstance(outcome.error, TemplateRenderError)

    def test_missing_element_list(self):
        outcome = render_template({"canvasSize": {"width": 794, "height": 1123}}, self.data)
        self.assertIsInstance(outcome.error, TemplateRenderError)

    def test_missing_image_draws_placeholder(self):
        self.data.school["logo_path"] = "/nonexistent/logo.png"
        outcome = self.render([element("image", metadata={"field": "school_logo"})])
        self.assertTrue(outcome.ok)

    def test_page_index_starts_new_pages(self):
        outcome = self.render([
            element("text", content="Page one"),
            element("text", content="Page two", page=1),
        ])
        self.assertTrue(outcome.ok)
        self.assertIn(b"/Count 2", outcome.content)

    def test_orientation_follows_canvas_size(self):
        self.assertEqual(template_pagesize({"canvasSize": {"width": 1123, "height": 794}}), landscape(A4))
        self.assertEqual(template_pagesize({"canvasSize": {"width": 794, "height": 1123}}), A4)
        self.assertEqual(template_pagesize({}), A4)


class RenderReportTests(SimpleTestCase):

    def setUp(self):
        self.data = RenderData.sample()

    def test_no_template_uses_fallback(self):
        report = render_report(None, self.data)
        self.assertTrue(report.used_fallback)
        self.assertIsNone(report.error)
        self.assertTrue(report.content.startswith(b"%PDF"))

    def test_valid_template_is_used(self):
        report = render_report({"elements": [element("dynamic", metadata={"field": "school_name"})]}, self.data)
        self.assertFalse(report.used_fallback)

    def test_broken_template_falls_back_with_error(self):
        report = render_report({"elements": [element("dynamic", metadata={"field": "shoe_size"})]}, self.data)
        self.assertTrue(report.used_fallback)
        self.assertIsInstance(report.error, TemplateRenderError)
        self.assertTrue(report.content.startswith(b"%PDF"))

    def test_rating_rows_keep_plain_text(self):
        rows = rating_rows("AFFECTIVE TRAITS", {"Attentiveness & Focus": 4, "Punctuality": "<5>"})
        self.assertEqual(rows, [
            ["AFFECTIVE TRAITS", "RATING"],
            ["Attentiveness & Focus", "4"],
            ["Punctuality", "<5>"],
        ])

    @override_settings(REPORT_CARD_WATERMARK="CONFIDENTIAL", REPORT_CARD_FOOTER="Official copy")
    def test_fallback_with_watermark(self):
        self.assertTrue(render_fallback(self.data).startswith(b"%PDF"))

    def test_fallback_with_sparse_data(self):
        data = RenderData(
            student={"name": "Ada <Obi> & Co"},
            school={"name": "Bright Future Academy", "primary_color": "nonsense"},
            class_info=None,
            session_name="2025/2026",
            period_name="First Term",
            subjects=[],
            component_names=[],
            grading_scale=[],
            summary={"total_score": 0, "average": 0, "overall_grade": "N/A",
                     "position": None, "students_in_class": 0},
        )
        self.assertTrue(render_fallback(data).startswith(b"%PDF"))
