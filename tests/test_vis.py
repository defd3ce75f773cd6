"""Tests for the Graphviz rendering of plans. Only the graph description is checked, nothing is rendered."""
import unittest

import graphviz as gv

import plancheck as pc
from plancheck import vis

from tests import explain_samples as samples


class PlotPlanTests(unittest.TestCase):
    def test_plot_plan(self) -> None:
        plan = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        graph = vis.plot_plan(plan)

        self.assertIsInstance(graph, gv.Digraph)
        self.assertIn("HashJoin_22", graph.source)
        self.assertIn("TableFullScan_26", graph.source)
        self.assertEqual(graph.source.count("->"), 6)
        self.assertIn("bold", graph.source)

    def test_plot_operator(self) -> None:
        plan = pc.parse_text(samples.IndexJoinQuery, samples.V4IndexHashJoin)
        graph = vis.plot_plan(plan.find("IndexLookUp_14(Probe)"))
        self.assertEqual(graph.source.count("->"), 2)
        self.assertNotIn("Projection_9", graph.source)

    def test_annotations(self) -> None:
        plan = pc.parse_text(samples.HashJoinQuery, samples.V4HashJoin)
        graph = vis.plot_plan(plan, annotation_generator=vis.annotate_estimates)
        self.assertIn("rows=12487.5", graph.source)
        self.assertIn("task=tikv", graph.source)


if __name__ == "__main__":
    unittest.main()
