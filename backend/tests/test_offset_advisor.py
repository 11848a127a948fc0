import unittest

from kilnlog.schemas import FiringRecord, ZoneOffsetSet, ZoneResults
from kilnlog.tools.offset_advisor import classify_adjustment, round_half_up, suggest_offsets


def firing(overall, target="6", top="", middle="", bottom=""):
    return FiringRecord(
        target_cone=target,
        overall_result=overall,
        zone_results=ZoneResults(top=top, middle=middle, bottom=bottom),
        zone_offsets=ZoneOffsetSet(),
    )


class TestOffsetAdvisor(unittest.TestCase):

    def setUp(self):
        self.offsets = ZoneOffsetSet(top=18, middle=18, bottom=18)

    def test_empty_history_has_no_suggestion(self):
        self.assertIsNone(suggest_offsets([], self.offsets))
        self.assertIsNone(suggest_offsets([], ZoneOffsetSet(top=0, middle=100, bottom=50)))

    def test_hot_zone_result_adds_twelve(self):
        history = [firing("unloaded", top="hot cone 6")]
        out = suggest_offsets(history, self.offsets)
        self.assertEqual(out.top, 30)
        # "unloaded" has no cone signal, so the other zones echo
        self.assertEqual(out.middle, 18)
        self.assertEqual(out.bottom, 18)

    def test_overshoot_by_one_cone(self):
        out = suggest_offsets([firing("cone 7")], self.offsets)
        self.assertEqual(out.top, 36)
        self.assertEqual(out.middle, 36)
        self.assertEqual(out.bottom, 36)

    def test_undershoot_by_one_cone(self):
        out = suggest_offsets([firing("cone 5")], self.offsets)
        self.assertEqual(out.middle, 0)

    def test_perfect_result_keeps_offset(self):
        out = suggest_offsets([firing("perfect cone 6")], self.offsets)
        self.assertEqual(out.middle, 18)

    def test_no_cone_text_means_no_drift(self):
        history = [firing("looked hot"), firing("good firing"), firing("soft glaze")]
        current = ZoneOffsetSet(top=7, middle=42, bottom=93)
        self.assertEqual(suggest_offsets(history, current), current)

    def test_exact_cone_without_wording_contributes_nothing(self):
        # Preserved behaviour: "cone 6" on a cone 6 target is neither counted nor adjusted
        out = suggest_offsets([firing("cone 6")], self.offsets)
        self.assertEqual(out.top, 18)

        # ...so it does not dilute the average of the valid readings either
        out = suggest_offsets([firing("cone 6"), firing("cone 7")], self.offsets)
        self.assertEqual(out.top, 36)

    def test_hot_wins_over_exact_cone(self):
        out = suggest_offsets([firing("cone 6 but slightly hot")], self.offsets)
        self.assertEqual(out.top, 30)

    def test_hot_wins_over_perfect(self):
        self.assertEqual(classify_adjustment("perfect cone 6, a bit soft", "6"), 12)

    def test_zone_text_overrides_overall(self):
        history = [firing("cone 7", bottom="perfect cone 6")]
        out = suggest_offsets(history, self.offsets)
        self.assertEqual(out.top, 36)
        self.assertEqual(out.bottom, 18)

    def test_case_insensitive(self):
        out = suggest_offsets([firing("HOT Cone 6")], self.offsets)
        self.assertEqual(out.top, 30)

    def test_cone_number_without_space(self):
        self.assertEqual(classify_adjustment("cone8", "6"), 36)

    def test_cone_without_number_contributes_nothing(self):
        self.assertIsNone(classify_adjustment("witness cone bent", "6"))

    def test_low_fire_target_reads_as_integer(self):
        # "04" compares as 4
        self.assertEqual(classify_adjustment("cone 5", "04"), 18)

    def test_only_last_five_firings_count(self):
        old = [firing("cone 10") for _ in range(3)]
        recent = [firing("perfect cone 6") for _ in range(5)]
        out = suggest_offsets(old + recent, self.offsets)
        self.assertEqual(out.top, 18)

        out = suggest_offsets(recent + old, self.offsets)
        # last five: two perfect (0) and three cone 10 (+72 each) -> 216 / 5 = 43.2 -> 43
        self.assertEqual(out.top, 61)

    def test_average_rounds_half_up(self):
        # +18, 0, 0, 0 -> 4.5 -> 5
        history = [firing("cone 7")] + [firing("good cone 6") for _ in range(3)]
        out = suggest_offsets(history, self.offsets)
        self.assertEqual(out.top, 23)

        # +12, -18, 0, 0 -> -1.5 -> -1
        history = [firing("hot cone 6"), firing("cone 5"), firing("good cone 6"), firing("good cone 6")]
        out = suggest_offsets(history, self.offsets)
        self.assertEqual(out.top, 17)

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(-2.6), -3)

    def test_suggestion_is_clamped(self):
        out = suggest_offsets([firing("cone 10")], ZoneOffsetSet(top=90, middle=90, bottom=90))
        self.assertEqual(out.top, 100)

        out = suggest_offsets([firing("cone 1")], ZoneOffsetSet(top=5, middle=5, bottom=5))
        self.assertEqual(out.top, 0)

    def test_suggestions_always_in_range(self):
        results = ["cone 10", "cone 1", "hot cone 6", "perfect cone 6", "cone 04", "soft cone 3"]
        for start in (0, 18, 55, 100):
            current = ZoneOffsetSet(top=start, middle=start, bottom=start)
            for i in range(len(results)):
                out = suggest_offsets([firing(r) for r in results[: i + 1]], current)
                for zone in ("top", "middle", "bottom"):
                    self.assertGreaterEqual(out.get(zone), 0)
                    self.assertLessEqual(out.get(zone), 100)

    def test_inputs_not_mutated(self):
        history = [firing("cone 7"), firing("hot cone 6", top="cone 5")]
        snapshot = [r.model_dump() for r in history]
        current = ZoneOffsetSet(top=20, middle=30, bottom=40)

        suggest_offsets(history, current)

        self.assertEqual([r.model_dump() for r in history], snapshot)
        self.assertEqual(current, ZoneOffsetSet(top=20, middle=30, bottom=40))


if __name__ == '__main__':
    unittest.main()
