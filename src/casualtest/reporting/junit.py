from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from junitparser import Error, Failure, JUnitXml, TestCase, TestSuite

from casualtest.metrics import aggregate_reports, suite_duration_stats
from casualtest.suite import CaseStatus

if TYPE_CHECKING:
    from casualtest.suite import SuiteReport


def write_junit(reports: list[SuiteReport], junit_path: Path) -> Path:
    """Write junit.xml with one testsuite per suite report, return path."""
    xml = JUnitXml()

    for report in reports:
        suite = TestSuite(report.label)
        suite.add_property("attempts", str(report.attempts))
        suite.add_property("passed", str(report.passed))
        suite.add_property("failed", str(report.failed))

        stats = suite_duration_stats(report)
        for stat_name, stat_val in stats.to_dict().items():
            if stat_val is not None:
                suite.add_property(f"duration_{stat_name}", str(stat_val))

        # Test cases: one per outcome
        for outcome in report.outcomes:
            case = TestCase(outcome.label, classname=report.label)
            case.time = round(outcome.duration_seconds, 4)
            if outcome.status is CaseStatus.FAILED:
                result = Failure(outcome.message, "ExpectationError")
                result.text = outcome.detail
                case.result = [result]
            elif outcome.status is CaseStatus.ERROR:
                result = Error(outcome.message, "TestCodeFailure")
                result.text = outcome.detail
                case.result = [result]
            suite.add_testcase(case)

        # Set time after add_testcase (add_testcase resets it via update_statistics)
        suite.time = report.duration_seconds

        # Use append (not +=) to preserve properties and time
        xml.append(suite)

    # Run totals
    summary = aggregate_reports(reports)
    xml.tests = summary.attempts
    xml.failures = summary.failed - summary.errors
    xml.errors = summary.errors
    xml.time = round(sum(r.duration_seconds for r in reports), 4)

    junit_path.parent.mkdir(parents=True, exist_ok=True)
    xml.write(str(junit_path), pretty=True)
    return junit_path


def generate_report(junit_path: Path, report_path: Path | None = None) -> Path:
    """Render junit.xml → report.html using Jinja2 template, return path."""
    from jinja2 import Environment, FileSystemLoader

    if report_path is None:
        report_path = junit_path.with_name("report.html")

    xml = JUnitXml.fromfile(str(junit_path))

    suites = []
    for suite in xml:
        cases = []
        for case in suite:
            result = None
            if case.result:
                result = {
                    "status": type(case.result[0]).__name__,
                    "message": case.result[0].message or "",
                    "detail": case.result[0].text or "",
                }
            cases.append({"name": case.name, "time": case.time, "result": result})

        suites.append(
            {
                "name": suite.name,
                "tests": suite.tests,
                "failures": suite.failures,
                "errors": suite.errors,
                "time": suite.time,
                "properties": {p.name: p.value for p in suite.properties()},
                "cases": cases,
            }
        )

    total_tests = sum(s["tests"] for s in suites)
    total_failures = sum(s["failures"] for s in suites)
    total_errors = sum(s["errors"] for s in suites)

    tmpl_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(str(tmpl_dir)), autoescape=True)
    template = env.get_template("report.html.j2")

    html = template.render(
        suites=suites,
        total_tests=total_tests,
        total_failures=total_failures,
        total_errors=total_errors,
        total_passed=total_tests - total_failures - total_errors,
        junit_path=str(junit_path),
    )
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(html, encoding="utf-8")
    return report_path
