"""Tests for parsing and comparing entire workloads."""
import unittest

import plancheck as pc
from plancheck import workloads
from plancheck.util.errors import FormatError, UnsupportedVersionError

from tests import explain_samples as samples


def _explains() -> dict[str, tuple[str, str]]:
    return {
        "q10": (samples.SelectionQuery, samples.V4DeepSelection),
        "q2": (samples.IndexJoinQuery, samples.V4IndexHashJoin),
        "q1": (samples.HashJoinQuery, samples.V4HashJoin),
    }


class ParseWorkloadTests(unittest.TestCase):
    def test_parse_workload(self) -> None:
        plans = workloads.parse_workload(_explains())
        self.assertEqual(list(plans.keys()), ["q10", "q2", "q1"])
        self.assertTrue(all(plan.version == pc.PlanVersion.V4 for plan in plans.values()))
        self.assertEqual(plans["q1"].root.id, "HashJoin_22")

    def test_expected_version(self) -> None:
        plans = workloads.parse_workload(_explains(), version="5.7.25-TiDB-v4.0.0")
        self.assertEqual(len(plans), 3)

    def test_version_mismatch(self) -> None:
        with self.assertRaises(FormatError):
            workloads.parse_workload(_explains(), version="v3")

    def test_unsupported_version(self) -> None:
        with self.assertRaises(UnsupportedVersionError):
            workloads.parse_workload(_explains(), version="9.9.9-Other")

    def test_malformed_report(self) -> None:
        explains = _explains()
        explains["q3"] = ("SELECT 1", samples.Truncated)
        with self.assertRaises(FormatError):
            workloads.parse_workload(explains)

    def test_skip_malformed_report(self) -> None:
        explains = _explains()
        explains["q3"] = ("SELECT 1", samples.Truncated)
        with self.assertWarns(UserWarning):
            plans = workloads.parse_workload(explains, skip_errors=True)
        self.assertNotIn("q3", plans)
        self.assertEqual(len(plans), 3)


class CompareWorkloadsTests(unittest.TestCase):
    def test_identical_workloads(self) -> None:
        baseline = workloads.parse_workload(_explains())
        candidate = workloads.parse_workload(_explains())
        report = workloads.compare_workloads(baseline, candidate)

        self.assertEqual(list(report.columns), [workloads.COL_LABEL, workloads.COL_SAME, workloads.COL_REASON])
        self.assertEqual(list(report[workloads.COL_LABEL]), ["q1", "q2", "q10"])
        self.assertTrue(report[workloads.COL_SAME].all())
        self.assertTrue((report[workloads.COL_REASON] == "").all())

    def test_changed_plan(self) -> None:
        explains = _explains()
        baseline = workloads.parse_workload(explains)
        explains["q10"] = (samples.SelectionQuery, samples.V4ShallowSelection)
        candidate = workloads.parse_workload(explains)

        report = workloads.compare_workloads(baseline, candidate).set_index(workloads.COL_LABEL)
        self.assertFalse(report.loc["q10", workloads.COL_SAME])
        self.assertIn("Selection_6", report.loc["q10", workloads.COL_REASON])
        self.assertTrue(report.loc["q1", workloads.COL_SAME])

    def test_missing_queries(self) -> None:
        baseline = workloads.parse_workload(_explains())
        candidate = dict(baseline)
        del candidate["q2"]
        candidate["q11"] = baseline["q1"]

        report = workloads.compare_workloads(baseline, candidate)
        self.assertEqual(list(report[workloads.COL_LABEL]), ["q1", "q2", "q10", "q11"])

        indexed = report.set_index(workloads.COL_LABEL)
        self.assertEqual(indexed.loc["q2", workloads.COL_REASON], workloads.MissingInCandidate)
        self.assertEqual(indexed.loc["q11", workloads.COL_REASON], workloads.MissingInBaseline)
        self.assertFalse(indexed.loc["q2", workloads.COL_SAME])
        self.assertFalse(indexed.loc["q11", workloads.COL_SAME])

    def test_empty_workloads(self) -> None:
        report = workloads.compare_workloads({}, {})
        self.assertTrue(report.empty)
        self.assertEqual(list(report.columns), [workloads.COL_LABEL, workloads.COL_SAME, workloads.COL_REASON])


if __name__ == "__main__":
    unittest.main()
