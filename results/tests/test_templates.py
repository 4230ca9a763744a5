from django.test import TestCase

from results.models import ResultTemplate
from results.templates import resolve_template
from schools.models import School, SchoolLevel
from .helpers import ResultFixtureMixin


class ResolveTemplateTests(ResultFixtureMixin, TestCase):

    def make_template(self, name, **kwargs):
        return ResultTemplate.objects.create(school=self.school, name=name, content={"elements": []}, **kwargs)

    def test_no_templates(self):
        self.assertIsNone(resolve_template(self.school, self.level, self.first_term))

    def test_tiers_in_order_of_specificity(self):
        any_template = self.make_template("Any")
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), any_template)

        default = self.make_template("Default", is_default=True)
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), default)

        period_only = self.make_template("First term", period=self.first_term)
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), period_only)

        level_only = self.make_template("Junior", level=self.level)
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), level_only)

        both = self.make_template("Junior first term", level=self.level, period=self.first_term)
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), both)

    def test_level_beats_newer_default(self):
        level_only = self.make_template("Junior", level=self.level)
        self.make_template("Default", is_default=True)
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), level_only)

    def test_level_tiers_skipped_without_level(self):
        self.make_template("Junior", level=self.level)
        period_only = self.make_template("First term", period=self.first_term)
        self.assertEqual(resolve_template(self.school, None, self.first_term), period_only)

    def test_newest_wins_within_tier(self):
        self.make_template("Old default", is_default=True)
        newer = self.make_template("New default", is_default=True)
        self.assertEqual(resolve_template(self.school, None, self.second_term), newer)

    def test_inactive_templates_ignored(self):
        self.make_template("Junior", level=self.level, is_active=False)
        default = self.make_template("Default", is_default=True)
        self.assertEqual(resolve_template(self.school, self.level, self.first_term), default)

    def test_other_schools_templates_ignored(self):
        other = School.objects.create(name="Other School")
        other_level = SchoolLevel.objects.create(school=other, name="Junior Secondary")
        ResultTemplate.objects.create(school=other, name="Theirs", level=other_level, is_default=True)
        self.assertIsNone(resolve_template(self.school, self.level, self.first_term))
