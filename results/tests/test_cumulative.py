from django.test import SimpleTestCase, TestCase, override_settings

from results.cumulative import (
    PeriodTotal, compute_cumulative_average, cumulative_for, progressive_average, simple_average,
    weighted_average,
)
from results.exceptions import InvalidConfigurationError
from results.models import ResultConfiguration
from .helpers import ResultFixtureMixin, make_result

SIMPLE = ResultConfiguration.SIMPLE_AVERAGE
WEIGHTED = ResultConfiguration.WEIGHTED_AVERAGE
PROGRESSIVE = ResultConfiguration.PROGRESSIVE_AVERAGE


class AverageMethodTests(SimpleTestCase):

    def test_simple_average(self):
        entries = [PeriodTotal(70), PeriodTotal(80), PeriodTotal(90)]
        self.assertEqual(simple_average(entries), 80)

    def test_weighted_average_missing_weights_count_as_one(self):
        entries = [PeriodTotal(70), PeriodTotal(80), PeriodTotal(90)]
        self.assertEqual(weighted_average(entries), 80.0)

    def test_weighted_average(self):
        entries = [PeriodTotal(70, 1), PeriodTotal(80, 1), PeriodTotal(90, 2)]
        self.assertEqual(weighted_average(entries), 82.5)

    def test_weighted_average_zero_weights(self):
        with self.assertRaises(InvalidConfigurationError):
            weighted_average([PeriodTotal(70, 0), PeriodTotal(80, 0)])

    def test_progressive_average_uses_term_position(self):
        entries = [PeriodTotal(70, order=1), PeriodTotal(80, order=2), PeriodTotal(90, order=3)]
        self.assertAlmostEqual(progressive_average(entries, [30, 30, 40]), 81.0)
        self.assertNotEqual(progressive_average(entries, [30, 30, 40]), simple_average(entries))

    def test_progressive_average_normalises_over_recorded_periods(self):
        entries = [PeriodTotal(60, order=1), PeriodTotal(80, order=2)]
        self.assertAlmostEqual(progressive_average(entries, [30, 30, 40]), 70.0)

    def test_progressive_average_reuses_last_weight(self):
        entries = [PeriodTotal(10, order=1), PeriodTotal(20, order=2), PeriodTotal(30, order=3)]
        self.assertAlmostEqual(progressive_average(entries, [1, 3]), 160 / 7)

    @override_settings(RESULTS_PROGRESSIVE_WEIGHTS=[1, 1, 2])
    def test_progressive_average_default_weights_from_settings(self):
        entries = [PeriodTotal(70, order=1), PeriodTotal(80, order=2), PeriodTotal(90, order=3)]
        self.assertAlmostEqual(progressive_average(entries), 82.5)


class ComputeCumulativeAverageTests(SimpleTestCase):

    def test_no_other_periods_returns_current_total(self):
        self.assertEqual(compute_cumulative_average(SIMPLE, PeriodTotal(95), []), 95.0)

    def test_disabled_returns_current_total(self):
        result = compute_cumulative_average(SIMPLE, PeriodTotal(95), [PeriodTotal(55)], enabled=False)
        self.assertEqual(result, 95.0)

    def test_includes_current_with_others(self):
        result = compute_cumulative_average(SIMPLE, PeriodTotal(90), [PeriodTotal(70), PeriodTotal(80)])
        self.assertEqual(result, 80)

    def test_weighted_method(self):
        result = compute_cumulative_average(WEIGHTED, PeriodTotal(90, 2), [PeriodTotal(70, 1), PeriodTotal(80, 1)])
        self.assertEqual(result, 82.5)

    def test_progressive_method_with_configured_weights(self):
        result = compute_cumulative_average(
            PROGRESSIVE,
            PeriodTotal(90, order=3),
            [PeriodTotal(70, order=1), PeriodTotal(80, order=2)],
            progressive_weights=[20, 30, 50],
        )
        self.assertAlmostEqual(result, 83.0)

    def test_unknown_method(self):
        with self.assertRaises(InvalidConfigurationError):
            compute_cumulative_average("median", PeriodTotal(90), [PeriodTotal(80)])


class CumulativeForTests(ResultFixtureMixin, TestCase):

    def test_reads_other_periods_of_same_subject_and_session(self):
        make_result(self.student, self.maths, self.first_term, 70, published=False)
        make_result(self.student, self.maths, self.second_term, 80)
        make_result(self.student, self.english, self.first_term, 10)

        value = cumulative_for(self.config, self.student, self.maths, self.third_term, 90)
        self.assertEqual(value, 80)

    def test_ignores_stored_result_for_same_period(self):
        make_result(self.student, self.maths, self.first_term, 40)
        value = cumulative_for(self.config, self.student, self.maths, self.first_term, 95)
        self.assertEqual(value, 95.0)

    def test_weighted_configuration(self):
        self.config.cumulative_method = WEIGHTED
        self.third_term.weight = 2
        self.third_term.save()
        make_result(self.student, self.maths, self.first_term, 70)
        make_result(self.student, self.maths, self.second_term, 80)

        value = cumulative_for(self.config, self.student, self.maths, self.third_term, 90)
        self.assertEqual(value, 82.5)
