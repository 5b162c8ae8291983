"""Tests for the rule-based query advisor."""

import pytest

from sqltrace.advisor import AdvisorConfig, QueryAdvisor, Severity
from sqltrace.models.plan import parse_execution_plan

from conftest import make_explain, make_node


def plan_of(root, execution: float = 1.0):
    return parse_execution_plan(make_explain(root, execution=execution))


@pytest.fixture
def advisor() -> QueryAdvisor:
    return QueryAdvisor()


class TestRules:
    """Each heuristic fires on its trigger and stays quiet otherwise."""

    def test_expensive_seq_scan(self, advisor):
        plan = plan_of(make_node("Seq Scan", total=5000.0, **{"Relation Name": "orders"}))
        analysis = advisor.analyze_plan(plan)

        high = [s for s in analysis.suggestions if s.severity == Severity.HIGH]
        assert len(high) == 1
        assert high[0].suggestion_type == "Index"
        assert high[0].title == "Expensive Sequential Scan Detected"
        assert "'orders'" in high[0].description
        assert "5000.00" in high[0].description
        assert high[0].node_index == 0
        assert analysis.performance_score <= 80

    def test_seq_scan_without_relation_name(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Seq Scan", total=1500.0)))
        assert "'unknown'" in analysis.suggestions[0].description

    def test_cheap_seq_scan_is_clean(self, advisor, simple_scan_plan):
        analysis = advisor.analyze_plan(simple_scan_plan)
        assert analysis.suggestions == []
        assert analysis.performance_score == 100

    def test_threshold_is_exclusive(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Seq Scan", total=1000.0)))
        assert analysis.suggestions == []

    def test_very_expensive_operation(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Aggregate", total=2500.0)))
        assert len(analysis.suggestions) == 1
        suggestion = analysis.suggestions[0]
        assert suggestion.suggestion_type == "Performance"
        assert suggestion.severity == Severity.MEDIUM
        assert suggestion.title == "Expensive Aggregate Operation"

    def test_large_nested_loop(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Nested Loop", rows=50000)))
        joins = [s for s in analysis.suggestions if s.suggestion_type == "Join"]
        assert joins and joins[0].severity == Severity.HIGH
        assert "50000 rows" in joins[0].description

    def test_large_sort(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Sort", rows=20000)))
        assert [(s.suggestion_type, s.severity) for s in analysis.suggestions] == [("Index", Severity.MEDIUM)]
        assert analysis.suggestions[0].title == "Large Sort Operation"

    def test_filter_suggests_index(self, advisor, join_plan):
        analysis = advisor.analyze_plan(join_plan)
        filters = [s for s in analysis.suggestions if s.title == "Potential Index Opportunity"]
        assert len(filters) == 1
        assert "(total > '100'::numeric)" in filters[0].description
        assert filters[0].node_index == 1

    def test_non_string_filter(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Seq Scan", Filter={"op": "and"})))
        assert "complex condition" in analysis.suggestions[0].description

    def test_filter_rule_can_be_disabled(self, join_plan):
        advisor = QueryAdvisor(AdvisorConfig(enable_index_suggestions=False))
        assert advisor.analyze_plan(join_plan).suggestions == []

    def test_expensive_join(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Hash Join", total=1500.0)))
        assert len(analysis.suggestions) == 1
        assert analysis.suggestions[0].suggestion_type == "Join"
        assert analysis.suggestions[0].title == "Expensive Hash Join Operation"

    def test_custom_thresholds(self):
        advisor = QueryAdvisor(AdvisorConfig(expensive_cost_threshold=10.0, large_scan_threshold=100))
        analysis = advisor.analyze_plan(plan_of(make_node("Nested Loop", total=50.0, rows=500)))
        titles = {s.title for s in analysis.suggestions}
        assert titles == {"Inefficient Nested Loop Join", "Expensive Nested Loop Operation"}


class TestScoring:

    def test_score_floor(self, advisor):
        scans = [make_node("Seq Scan", total=5000.0, **{"Relation Name": f"t{i}"}) for i in range(6)]
        analysis = advisor.analyze_plan(plan_of(make_node("Append", total=30000.0, children=scans)))
        assert analysis.performance_score == 10

    def test_slow_execution_penalty(self, advisor):
        analysis = advisor.analyze_plan(plan_of(make_node("Result"), execution=1500.0))
        assert analysis.suggestions == []
        assert analysis.performance_score == 90

    def test_score_range_and_node_indices(self, advisor, join_plan):
        analysis = advisor.analyze_plan(join_plan)
        assert 10 <= analysis.performance_score <= 100
        assert analysis.nodes_visited == 4
        assert all(s.node_index < analysis.nodes_visited for s in analysis.suggestions)

    def test_deterministic(self, advisor, join_plan):
        assert advisor.analyze_plan(join_plan) == advisor.analyze_plan(join_plan)


class TestSummary:

    def test_summary_fields(self, advisor, join_plan):
        summary = advisor.analyze_plan(join_plan).summary
        assert summary.total_suggestions == 1
        assert summary.high_severity_count == 0
        assert summary.most_expensive_operation == "Hash Join"
        assert summary.total_cost == 45.0
        assert summary.potential_improvement.startswith("Low")

    def test_repeated_node_type_keeps_last_cost(self, advisor):
        root = make_node("Append", total=100.0, children=[
            make_node("Seq Scan", total=500.0),
            make_node("Seq Scan", total=50.0),
        ])
        assert advisor.analyze_plan(plan_of(root)).summary.most_expensive_operation == "Append"

    @pytest.mark.parametrize("scans,expected", [
        (1, "Medium"),
        (2, "Medium"),
        (3, "High"),
    ])
    def test_improvement_bucket(self, advisor, scans, expected):
        children = [make_node("Seq Scan", total=1500.0) for _ in range(scans)]
        root = make_node("Append", total=1500.0, children=children)
        summary = advisor.analyze_plan(plan_of(root)).summary
        assert summary.high_severity_count == scans
        assert summary.potential_improvement.startswith(expected)

    def test_by_severity_orders_high_first(self, advisor):
        root = make_node("Sort", rows=20000, children=[
            make_node("Seq Scan", total=1500.0, **{"Relation Name": "orders"}),
        ])
        analysis = advisor.analyze_plan(plan_of(root))
        assert [s.severity for s in analysis.by_severity()] == [Severity.HIGH, Severity.MEDIUM]

    def test_to_dict(self, advisor, join_plan):
        data = advisor.analyze_plan(join_plan).to_dict()
        assert data["suggestions"][0]["severity"] == "Medium"
        assert data["summary"]["most_expensive_operation"] == "Hash Join"
