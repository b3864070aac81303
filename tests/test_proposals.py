import unittest
from datetime import date

from workday_cpm.models import DependencyType
from workday_cpm.proposals import (
    INVALID_GRAPH,
    ActivityProposal,
    SuccessorSuggestion,
    evaluate_proposal,
    proposal_to_activities,
)

MONDAY = date(2024, 3, 4)


def sample_proposal():
    return [
        ActivityProposal(1, "Project Start", 0, [SuccessorSuggestion(2), SuccessorSuggestion(3)]),
        ActivityProposal(2, "Foundations", 5, [SuccessorSuggestion(4)]),
        ActivityProposal(3, "Site setup", 2, [SuccessorSuggestion(2, DependencyType.SS)]),
        ActivityProposal(4, "Project End", 0),
    ]


class TestProposals(unittest.TestCase):
    def test_successors_become_predecessor_strings(self):
        activities = proposal_to_activities(sample_proposal())
        predecessors = {act.id: act.predecessors for act in activities}
        self.assertEqual(predecessors, {1: "", 2: "1FS,3SS", 3: "1FS", 4: "2FS"})

    def test_unknown_successor_is_ignored(self):
        proposal = [ActivityProposal(1, "Project Start", 0, [SuccessorSuggestion(42)])]
        self.assertEqual(proposal_to_activities(proposal)[0].predecessors, "")

    def test_evaluate_connected_proposal(self):
        scores = evaluate_proposal(sample_proposal(), MONDAY)
        self.assertEqual(scores["Calculated Duration (workdays)"], 5)
        self.assertEqual(scores["Total Activities"], 4)
        self.assertEqual(scores["Total Successor Links"], 4)
        self.assertEqual(scores["Has Start/End"], "Yes")
        self.assertEqual(scores["Overall Status"], "Success")

    def test_evaluate_without_end(self):
        proposal = [
            ActivityProposal(1, "Project Start", 0, [SuccessorSuggestion(2)]),
            ActivityProposal(2, "Foundations", 5),
        ]
        scores = evaluate_proposal(proposal, MONDAY)
        self.assertEqual(scores["Calculated Duration (workdays)"], INVALID_GRAPH)
        self.assertEqual(scores["Has Start/End"], "No")
        self.assertEqual(scores["Overall Status"], "Failed")

    def test_evaluate_empty_proposal(self):
        scores = evaluate_proposal([], MONDAY)
        self.assertEqual(scores["Total Activities"], 0)
        self.assertTrue(scores["Overall Status"].startswith("Failed"))


if __name__ == "__main__":
    unittest.main()
