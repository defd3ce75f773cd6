"""Tests for the structural comparison of plans."""
import unittest

import plancheck as pc

from tests import explain_samples as samples
from tests import regression_suite


class PlanComparisonTests(regression_suite.PlanTestCase):
    def test_identical_plans(self) -> None:
        first = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        second = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        self.assertEqual(pc.compare(first, second), ("", True))

    def test_plan_is_equal_to_itself(self) -> None:
        for query, sample in [(samples.HashJoinQuery, samples.V4HashJoin),
                              (samples.IndexJoinQuery, samples.V4IndexHashJoin),
                              ("SELECT 1", samples.V3IndexJoin)]:
            with self.subTest(query=query):
                plan = pc.parse_text(query, sample)
                self.assertPlansEqual(plan, plan)

    def test_sql_normalization(self) -> None:
        first = pc.parse_text("SELECT * FROM t1 JOIN t2 ON t1.a = t2.a;  ", samples.V4HashJoin)
        second = pc.parse_text("  SELECT * FROM t1 JOIN t2 ON t1.a = t2.a", samples.V4HashJoin)
        self.assertPlansEqual(first, second)

    def test_different_sql(self) -> None:
        first = pc.parse_text("SELECT 1", samples.V4HashJoin)
        second = pc.parse_text("SELECT 2", samples.V4HashJoin)
        reason, same = pc.compare(first, second)
        self.assertFalse(same)
        self.assertTrue(reason)

    def test_estimates_and_ids_are_ignored(self) -> None:
        changed = (samples.V4HashJoin
                   .replace("HashJoin_22 ", "HashJoin_99 ")
                   .replace("12487.50", "10000.00"))
        first = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        second = pc.parse_text(samples.HashJoinQuery, changed)
        self.assertNotEqual(first, second)
        self.assertPlansEqual(first, second)

    def test_renamed_table(self) -> None:
        renamed = samples.V4HashJoin.replace("| table:t1 ", "| table:t3 ")
        first = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        second = pc.parse_text(samples.HashJoinQuery, renamed)

        reason = self.assertPlansDiffer(first, second)
        self.assertIn("TableFullScan_26", reason)
        self.assertIn("t1", reason)
        self.assertIn("t3", reason)

    def test_renamed_index(self) -> None:
        renamed = samples.V4IndexHashJoin.replace("index:idx_a(a)", "index:idx_b(a)")
        first = pc.parse_text(samples.IndexJoinQuery, samples.V4IndexHashJoin)
        second = pc.parse_text(samples.IndexJoinQuery, renamed)

        reason = self.assertPlansDiffer(first, second)
        self.assertIn("IndexRangeScan_11(Build)", reason)
        self.assertIn("idx_a(a)", reason)
        self.assertIn("idx_b(a)", reason)

    def test_different_children_lengths(self) -> None:
        deep = pc.parse_text(samples.SelectionQuery, samples.V4DeepSelection)
        shallow = pc.parse_text(samples.SelectionQuery, samples.V4ShallowSelection)

        reason, same = pc.compare(deep, shallow)
        self.assertFalse(same)
        self.assertIn("Selection_6", reason)
        self.assertIn("children", reason)

    def test_different_operator_types(self) -> None:
        merge_join = samples.V4HashJoin.replace("HashJoin_22 ", "MergeJoin_22")
        first = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        second = pc.parse_text(samples.HashJoinQuery, merge_join)

        reason = self.assertPlansDiffer(first, second)
        self.assertIn("HashJoin_22", reason)
        self.assertIn("MergeJoin_22", reason)

    def test_different_tasks(self) -> None:
        pushed_down = samples.V4HashJoin.replace("| cop[tikv] | table:t2 ", "| cop[tiflash] | table:t2 ")
        first = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        second = pc.parse_text(samples.HashJoinQuery, pushed_down)

        reason = self.assertPlansDiffer(first, second)
        self.assertIn("TableFullScan_23", reason)

    def test_comparison_is_symmetric(self) -> None:
        deep = pc.parse_text(samples.SelectionQuery, samples.V4DeepSelection)
        shallow = pc.parse_text(samples.SelectionQuery, samples.V4ShallowSelection)
        self.assertFalse(pc.compare(deep, shallow)[1])
        self.assertFalse(pc.compare(shallow, deep)[1])

    def test_first_difference_is_reported(self) -> None:
        changed = (samples.V4HashJoin
                   .replace("| table:t2 ", "| table:t4 ")
                   .replace("| table:t1 ", "| table:t3 "))
        first = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        second = pc.parse_text(samples.HashJoinQuery, changed)

        reason = self.assertPlansDiffer(first, second)
        self.assertIn("TableFullScan_23", reason)
        self.assertNotIn("TableFullScan_26", reason)


class OperatorComparisonTests(regression_suite.PlanTestCase):
    def test_compare_subtrees(self) -> None:
        plan = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        build_side, probe_side = plan.root.children
        reason, same = pc.compare_operators(build_side, probe_side)
        self.assertFalse(same)
        self.assertIn("TableFullScan_23:t2", reason)
        self.assertIn("TableFullScan_26:t1", reason)

    def test_compare_handcrafted_operators(self) -> None:
        first = pc.Operator("PointGet_1", pc.OperatorType.PointGet, est_rows=1, task=pc.TaskType.Root)
        second = pc.Operator("PointGet_7", pc.OperatorType.PointGet, est_rows=1, task=pc.TaskType.Root)
        self.assertPlansEqual(first, second)


if __name__ == "__main__":
    unittest.main()
