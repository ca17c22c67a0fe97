from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(name="casualtest", help="Run casualtest scripts and report results")


@app.command()
def run(
    files: list[str] | None = typer.Argument(
        None, help="Test scripts to run, in order"
    ),
    config: str | None = typer.Option(None, help="Path to a run YAML config"),
    junit: str | None = typer.Option(None, help="Write junit.xml to this path"),
    html: str | None = typer.Option(
        None, help="Write an HTML report to this path (junit.xml goes beside it unless --junit is given)"
    ),
    debug_log: str | None = typer.Option(
        None, "--debug-log", help="Also write a timestamped debug log here"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Run test scripts that call casualtest suites and summarise their results."""
    import runpy

    import yaml

    from casualtest.config import load_config
    from casualtest.metrics import aggregate_reports
    from casualtest.suite import collect_reports
    from casualtest.verbose import setup_logger

    script_paths = [Path(f) for f in files or []]
    if config is not None:
        config_path = Path(config)
        if not config_path.exists():
            typer.echo(f"Error: config file not found: {config}", err=True)
            raise typer.Exit(1)
        try:
            run_config = load_config(config_path)
        except (ValueError, yaml.YAMLError) as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
        if not script_paths:
            script_paths = [Path(f) for f in run_config.files]
        junit = junit or run_config.junit
        html = html or run_config.html
        debug_log = debug_log or run_config.debug_log
        verbose = verbose or run_config.verbose

    if not script_paths:
        typer.echo("Error: no test scripts given", err=True)
        raise typer.Exit(1)

    missing = [str(p) for p in script_paths if not p.is_file()]
    if missing:
        typer.echo(f"Error: test script not found: {', '.join(missing)}", err=True)
        raise typer.Exit(1)

    logger = setup_logger(
        Path(debug_log) if debug_log else None, verbose=verbose
    )

    broken_scripts = 0
    with collect_reports() as reports:
        for path in script_paths:
            logger.debug(f"Running script {path}")
            try:
                runpy.run_path(str(path), run_name="__main__")
            except SystemExit as e:
                if e.code not in (None, 0):
                    broken_scripts += 1
                    typer.echo(f"Error: {path} exited with status {e.code}", err=True)
            except Exception as e:
                broken_scripts += 1
                typer.echo(f"Error: {path} raised {type(e).__name__}: {e}", err=True)

    summary = aggregate_reports(reports)
    typer.echo(
        f"{summary.suites} suite(s): {summary.passed}/{summary.attempts} tests passed, "
        f"{summary.failed} failed ({summary.errors} test code failure(s))"
    )

    if html and not junit:
        junit = str(Path(html).with_name("junit.xml"))
    if junit:
        from casualtest.reporting.junit import write_junit

        junit_path = write_junit(reports, Path(junit))
        typer.echo(f"JUnit: {junit_path}")
        if html:
            from casualtest.reporting.junit import generate_report

            report_path = generate_report(junit_path, Path(html))
            typer.echo(f"Report: {report_path}")

    # Exit with non-zero if any test failed or a script could not finish
    if broken_scripts or not summary.ok:
        raise typer.Exit(1)


@app.command()
def report(
    junit_xml: str = typer.Argument(help="Path to a junit.xml written by `run`"),
    html: str | None = typer.Option(
        None, help="Output path (defaults to report.html beside the junit file)"
    ),
):
    """Regenerate the HTML report from a junit.xml file."""
    from casualtest.reporting.junit import generate_report

    junit_path = Path(junit_xml)
    if not junit_path.is_file():
        typer.echo(f"Error: junit file not found: {junit_xml}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(junit_path, Path(html) if html else None)
    typer.echo(f"Report generated: {report_path}")
