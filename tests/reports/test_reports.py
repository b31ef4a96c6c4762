import unittest

from dbcheck.config import ProbeConfig
from dbcheck.core.models import (
    LambdaIntegrationReport,
    PolicyResult,
    ProcedureRecord,
    RoutineDiagnostic,
    SchemaCollation,
    TableCollation,
)
from dbcheck.reports.html_report import render_checks_report, render_unicode_report
from dbcheck.reports.metrics import build_registry, render_metrics


def sample_results():
    return {
        "dbinfo": PolicyResult(name="dbinfo", value=1.0, labels={
            "schemaversion": "v5.41.0", "auroraversion": "2.07.2", "commit": "abc1234",
        }, description="A metric with a constant '1' value."),
        "user_group_map_total": PolicyResult(name="user_group_map_total", value=42.0),
        "slowlog": PolicyResult(name="slowlog", value=0.0, labels={
            "enabled": "1", "log_output": "FILE", "log_queries_not_using_indexes": "0",
        }),
        "iam": PolicyResult(name="iam", value=1.0),
        "insync": PolicyResult(name="insync", value=0.0),
    }


class TestMetrics(unittest.TestCase):
    def test_exposition_text(self):
        text = render_metrics(sample_results())
        self.assertIn("user_group_map_total 42.0", text)
        self.assertIn("insync 0.0", text)
        self.assertIn("# HELP dbinfo A metric with a constant '1' value.", text)

    def test_labelled_signals_carry_their_facts(self):
        registry = build_registry(sample_results())
        self.assertEqual(registry.get_sample_value("dbinfo", {
            "schemaversion": "v5.41.0", "auroraversion": "2.07.2", "commit": "abc1234",
        }), 1.0)
        self.assertEqual(registry.get_sample_value("slowlog", {
            "enabled": "1", "log_output": "FILE", "log_queries_not_using_indexes": "0",
        }), 0.0)

    def test_registries_are_independent(self):
        first = build_registry(sample_results())
        second = build_registry(sample_results())
        self.assertEqual(first.get_sample_value("iam"), 1.0)
        self.assertEqual(second.get_sample_value("user_group_map_total"), 42.0)


class TestHtmlReports(unittest.TestCase):
    def setUp(self):
        self.config = ProbeConfig()

    def test_checks_report(self):
        good = RoutineDiagnostic(
            procedure=ProcedureRecord(schema="bugzilla", name="lambda_notification",
                                      database_collation="utf8mb4_unicode_520_ci",
                                      character_set_client="utf8mb4", source="CALL mysql.lambda_async(...)"),
            correct_collation=True, checked_arn=True, function="alambda_simple", account="812644853088",
        )
        bad = RoutineDiagnostic(
            procedure=ProcedureRecord(schema="bugzilla", name="add_user",
                                      database_collation="latin1_swedish_ci", character_set_client="utf8mb4"),
            correct_collation=False,
        )
        report = LambdaIntegrationReport(invoker="lambda_invoker", role_arn="arn:aws:iam::1:role/r",
                                         routines={"bugzilla": [good, bad]})

        html = render_checks_report(report, self.config)

        self.assertIn("<h2>Database: bugzilla</h2>", html)
        self.assertIn("Issues: 1 / 2", html)
        self.assertIn("Fn: alambda_simple", html)
        self.assertIn('class="bad">DatabaseCollation: latin1_swedish_ci', html)
        self.assertIn("<style>", html)

    def test_unicode_report_escapes_and_flags(self):
        schemas = [
            SchemaCollation(name="bugzilla", create_statement="CREATE DATABASE `bugzilla` <x>",
                            database_collation="utf8mb4_unicode_520_ci", character_set_client="utf8mb4",
                            correct=True, tables=[
                                TableCollation("bugs", "utf8mb4_unicode_520_ci", True),
                                TableCollation("legacy", "latin1_swedish_ci", False),
                                TableCollation("a_view", None, False),
                            ]),
            SchemaCollation(name="unee_t_enterprise", error="access denied"),
        ]
        html = render_unicode_report(schemas, self.config)

        self.assertIn("&lt;x&gt;", html)
        self.assertIn('<span class="bad">latin1_swedish_ci</span>', html)
        self.assertIn("a_view - Missing collation", html)
        self.assertIn('<p class="bad">access denied</p>', html)


if __name__ == "__main__":
    unittest.main()
