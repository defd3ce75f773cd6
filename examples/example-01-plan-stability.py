#!/usr/bin/env python3
#
# This script shows the basic steps of a plan stability check with plancheck: the same query is explained on two TiDB
# versions and the resulting plans are compared. The EXPLAIN output is given inline here. In a real scenario it would be
# obtained by running EXPLAIN on both servers, e.g. via the MySQL client.
#
# Requirements: none, plancheck never connects to TiDB itself. The Graphviz binaries are only needed to render the plan in
# Step 4.
#

# Step 0: imports
# The main plancheck package provides access to parsing and comparison. Visualization lives in a separate sub-package.
import plancheck as pc
from plancheck import vis

query = "SELECT * FROM t1 JOIN t2 ON t1.a = t2.a"

v3_output = """
+--------------------------+----------+------+-------------------------------------------------------------+
| id                       | count    | task | operator info                                               |
+--------------------------+----------+------+-------------------------------------------------------------+
| HashLeftJoin_8           | 12487.50 | root | inner join, equal:[eq(test.t1.a, test.t2.a)]                |
| ├─TableReader_11         | 9990.00  | root | data:Selection_10                                           |
| │ └─Selection_10         | 9990.00  | cop  | not(isnull(test.t1.a))                                      |
| │   └─TableScan_9        | 10000.00 | cop  | table:t1, range:[-inf,+inf], keep order:false, stats:pseudo |
| └─TableReader_14         | 9990.00  | root | data:Selection_13                                           |
|   └─Selection_13         | 9990.00  | cop  | not(isnull(test.t2.a))                                      |
|     └─TableScan_12       | 10000.00 | cop  | table:t2, range:[-inf,+inf], keep order:false, stats:pseudo |
+--------------------------+----------+------+-------------------------------------------------------------+
"""

v4_output = """
+-----------------------------+----------+-----------+---------------+----------------------------------------------+
| id                          | estRows  | task      | access object | operator info                                |
+-----------------------------+----------+-----------+---------------+----------------------------------------------+
| HashJoin_22                 | 12487.50 | root      |               | inner join, equal:[eq(test.t1.a, test.t2.a)] |
| ├─TableReader_25(Build)     | 9990.00  | root      |               | data:Selection_24                            |
| │ └─Selection_24            | 9990.00  | cop[tikv] |               | not(isnull(test.t2.a))                       |
| │   └─TableFullScan_23      | 10000.00 | cop[tikv] | table:t2      | keep order:false, stats:pseudo               |
| └─TableReader_28(Probe)     | 9990.00  | root      |               | data:Selection_27                            |
|   └─Selection_27            | 9990.00  | cop[tikv] |               | not(isnull(test.t1.a))                       |
|     └─TableFullScan_26      | 10000.00 | cop[tikv] | table:t1      | keep order:false, stats:pseudo               |
+-----------------------------+----------+-----------+---------------+----------------------------------------------+
"""

# Step 1: Parsing
# The report dialect is inferred from the table header. Alternatively, pc.parse accepts already split rows together with
# the TiDB version string of the server.
old_plan = pc.parse_text(query, v3_output)
new_plan = pc.parse_text(query, v4_output)
print(old_plan.format())
print(new_plan.format())

# Step 2: Inspection
print(old_plan.summary())
print(new_plan.ast())

# Step 3: Comparison
# Here, the build and probe side of the hash join have been swapped in the new version.
reason, same = pc.compare(old_plan, new_plan)
print("Plans are equivalent" if same else f"Plan changed: {reason}")

# Step 4: Visualization
plan_graph = vis.plot_plan(new_plan, annotation_generator=vis.annotate_estimates)
print(plan_graph.source)
