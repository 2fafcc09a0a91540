from __future__ import annotations

from skipsetup_core.reporting import Reporter, format_config_table, format_stage, format_tags


def test_format_helpers() -> None:
    assert format_stage(3, 9, "Install dependencies") == "[3/9] Install dependencies"
    assert format_tags([]) == "None"
    assert format_tags(["auth", "db"]) == "[auth] [db]"


def test_config_table_rows() -> None:
    table = format_config_table(
        tier="small",
        description="Minimal MVP",
        rows=[("Modules", ["auth"]), ("Infra", [])],
    )
    lines = table.splitlines()
    assert lines[0] == "CONFIGURATION"
    assert "SMALL" in lines[2]
    assert any(line.startswith("Modules") and line.endswith("[auth]") for line in lines)
    assert any(line.startswith("Infra") and line.endswith("None") for line in lines)


def test_warnings_and_errors_go_to_err(reporter: Reporter) -> None:
    reporter.info("hello")
    reporter.warn("careful")
    reporter.error("broken")
    assert reporter.out.getvalue() == "hello\n"
    assert reporter.err.getvalue() == "WARNING: careful\nERROR: broken\n"


def test_successful_summary_lists_warnings_and_next_steps(reporter: Reporter) -> None:
    reporter.summary(ok=True, headline="done", warnings=["w1", "w2"], next_steps=["cd app"])
    assert reporter.out.getvalue().splitlines() == [
        "done",
        "Completed with 2 warning(s):",
        "- w1",
        "- w2",
        "Next steps:",
        "  cd app",
    ]


def test_failed_summary_reports_error_only(reporter: Reporter) -> None:
    reporter.summary(ok=False, headline="failed at stage 2", warnings=["w1"], next_steps=["cd app"])
    assert reporter.out.getvalue() == ""
    assert reporter.err.getvalue() == "ERROR: failed at stage 2\n"
