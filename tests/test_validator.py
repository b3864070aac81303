import unittest

from workday_cpm.models import Activity, SentinelKind
from workday_cpm.validator import PASS_MESSAGE, build_graph, validate


def connected_schedule():
    return [
        Activity(1, "Project Start", 0),
        Activity(2, "Foundations", 5, "1FS"),
        Activity(3, "Project End", 0, "2FS"),
    ]


class TestValidate(unittest.TestCase):
    def test_connected_schedule_passes(self):
        result = validate(connected_schedule())
        self.assertTrue(result.ok)
        self.assertEqual(result.errors, [])
        self.assertEqual(result.message, PASS_MESSAGE)

    def test_missing_end_halts(self):
        activities = [
            Activity(1, "Project Start", 0),
            Activity(2, "Foundations", 5, "1FS"),
        ]
        result = validate(activities)
        self.assertFalse(result.ok)
        self.assertEqual(result.errors, ['The schedule is missing a "Project End" activity.'])
        self.assertTrue(result.message.startswith("Fail:"))

    def test_missing_both_sentinels(self):
        result = validate([Activity(5, "Framing", 3)])
        self.assertEqual(len(result.errors), 2)
        self.assertIn("Project Start", result.errors[0])
        self.assertIn("Project End", result.errors[1])

    def test_empty_schedule_has_no_sentinels(self):
        self.assertFalse(validate([]).ok)

    def test_sentinel_names_are_case_insensitive_substrings(self):
        activities = [
            Activity(1, "PROJECT START milestone", 0),
            Activity(2, "Works", 1, "1"),
            Activity(3, "Project End - handover", 0, "2"),
        ]
        self.assertTrue(validate(activities).ok)

    def test_explicit_sentinel_kind(self):
        activities = [
            Activity(1, "Kick-off", 0, kind=SentinelKind.START),
            Activity(2, "Works", 1, "1"),
            Activity(3, "Handover", 0, "2", kind=SentinelKind.END),
        ]
        self.assertTrue(validate(activities).ok)

    def test_unknown_reference_and_orphan_reported_together(self):
        activities = [
            Activity(1, "Project Start", 0),
            Activity(2, "Foundations", 5, "1"),
            Activity(7, "Roofing", 2, "99"),
            Activity(3, "Project End", 0, "2,7"),
        ]
        result = validate(activities)
        self.assertFalse(result.ok)
        self.assertEqual(
            result.errors,
            [
                'Activity "Roofing" lists a non-existent predecessor with ID 99.',
                'Orphan Task: Activity "Roofing" (ID 7) is unreachable from "Project Start".',
            ],
        )

    def test_dangling_task(self):
        activities = [
            Activity(1, "Project Start", 0),
            Activity(2, "Foundations", 5, "1"),
            Activity(3, "Landscaping", 2, "1"),
            Activity(4, "Project End", 0, "2"),
        ]
        result = validate(activities)
        self.assertEqual(len(result.errors), 1)
        self.assertTrue(result.errors[0].startswith('Dangling Task: Activity "Landscaping" (ID 3)'))

    def test_cycle_is_reported(self):
        activities = [
            Activity(1, "Project Start", 0),
            Activity(2, "A", 1, "1,3"),
            Activity(3, "B", 1, "2"),
            Activity(4, "Project End", 0, "3"),
        ]
        result = validate(activities)
        self.assertFalse(result.ok)
        self.assertEqual(len(result.errors), 1)
        self.assertIn("Circular dependency detected", result.errors[0])

    def test_duplicate_sentinels_and_ids(self):
        activities = [
            Activity(1, "Project Start", 0),
            Activity(2, "Project Start again", 0, "1"),
            Activity(2, "Works", 1, "1"),
            Activity(3, "Project End", 0, "2"),
        ]
        errors = validate(activities).errors
        self.assertTrue(any("more than one" in e for e in errors))
        self.assertTrue(any("reuses ID 2" in e for e in errors))

    def test_build_graph(self):
        graph = build_graph(connected_schedule())
        self.assertEqual(sorted(graph.edges()), [(1, 2), (2, 3)])
        self.assertEqual(graph.edges[1, 2]["rel_type"], "FS")


if __name__ == "__main__":
    unittest.main()
