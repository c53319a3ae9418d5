"""Production Data Cleanup - delete all user-generated data, keep system defaults.

Invariants:
    - Tables are cleared in CLEANUP_ORDER (children before parents), then
      users WHERE user_type != 'admin'; credit_configs is never touched
    - All deletes run in one transaction: the first failing statement aborts
      the rest and rolls everything back (CleanupError)
    - Referential-integrity checks are disabled before the deletes and always
      restored afterwards; a failed restore is logged, never raised over the
      original error
    - Running twice is safe: the second run deletes 0 rows everywhere

Design Decisions:
    - PostgreSQL uses session_replication_role (connection-scoped), SQLite the
      foreign_keys pragma; other dialects run with integrity checks on
    - The CLI asks for confirmation unless --yes; exit status 1 on any failure
"""

import asyncio
import logging
from dataclasses import dataclass, field

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from qipad.config import get_settings
from qipad.core.errors import CleanupError
from qipad.db.session import create_engine_for
from qipad.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

CLEANUP_ORDER: tuple[str, ...] = (
    "notifications",
    "wallet_transactions",
    "wallets",
    "connections",
    "project_bids",
    "bidding_projects",
    "community_posts",
    "community_members",
    "communities",
    "event_participants",
    "events",
    "investments",
    "documents",
    "projects",
    "companies",
    "object_acls",
)
USERS_STEP = "users"
PRESERVED_TABLES: tuple[str, ...] = ("credit_configs",)


@dataclass
class CleanupReport:
    deleted: dict[str, int] = field(default_factory=dict)
    integrity_restored: bool = True

    @property
    def total(self) -> int:
        return sum(self.deleted.values())


async def _set_integrity_checks(conn: AsyncConnection, enabled: bool) -> None:
    dialect = conn.dialect.name
    if dialect == "postgresql":
        role = "DEFAULT" if enabled else "replica"
        await conn.execute(text(f"SET session_replication_role = {role}"))
    elif dialect == "sqlite":
        await conn.execute(text(f"PRAGMA foreign_keys = {'ON' if enabled else 'OFF'}"))
    else:
        logger.warning(f"Integrity toggle unsupported on {dialect}; leaving it on")
        return
    await conn.commit()


async def run_cleanup(engine: AsyncEngine) -> CleanupReport:
    """Delete user data in dependency order; raises CleanupError on failure."""
    report = CleanupReport()
    async with engine.connect() as conn:
        await _set_integrity_checks(conn, enabled=False)
        step = CLEANUP_ORDER[0]
        try:
            for step in CLEANUP_ORDER:
                result = await conn.execute(text(f"DELETE FROM {step}"))
                report.deleted[step] = max(result.rowcount or 0, 0)
                logger.info(
                    f"Cleared {step}",
                    extra={"table": step, "rows": report.deleted[step]},
                )
            step = USERS_STEP
            result = await conn.execute(
                text("DELETE FROM users WHERE user_type != 'admin'"),
            )
            report.deleted[USERS_STEP] = max(result.rowcount or 0, 0)
            logger.info(
                "Cleared users (preserved admin accounts)",
                extra={"table": USERS_STEP, "rows": report.deleted[USERS_STEP]},
            )
            await conn.commit()
        except SQLAlchemyError as e:
            await conn.rollback()
            logger.error(f"Cleanup failed at {step}: {e}", extra={"table": step})
            raise CleanupError(step, str(e.__cause__ or e))
        finally:
            try:
                await _set_integrity_checks(conn, enabled=True)
            except SQLAlchemyError as e:
                report.integrity_restored = False
                logger.error(f"Failed to re-enable integrity checks: {e}")
    return report


async def _cleanup_database(database_url: str) -> CleanupReport:
    engine = create_engine_for(database_url)
    try:
        return await run_cleanup(engine)
    except (SQLAlchemyError, OSError) as e:
        # connect or integrity toggle failed before any delete ran
        logger.error(f"Cleanup could not start: {e}")
        raise CleanupError("connection", str(e))
    finally:
        await engine.dispose()


# --- CLI ---------------------------------------------------------

app = typer.Typer(help="Remove all user-generated data while preserving system defaults.")

_console = Console()


def _render(report: CleanupReport) -> Table:
    table = Table(title="Production data cleanup")
    table.add_column("Table", style="bright_green", no_wrap=True)
    table.add_column("Rows deleted", justify="right")
    for name, rows in report.deleted.items():
        table.add_row(name, str(rows))
    table.add_row("[bold]total[/bold]", f"[bold]{report.total}[/bold]")
    return table


@app.command()
def main(
    database_url: str | None = typer.Option(
        None, "--database-url", help="Defaults to DATABASE_URL from settings.",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
    log_level: str = typer.Option("WARNING", "--log-level"),
) -> None:
    """Permanently delete ALL user data. Admin accounts and credit costs are kept."""
    settings = get_settings()
    setup_logging(log_level, settings.log_format, component="cleanup")
    url = database_url or settings.database_url
    if not url:
        _console.print("[red]DATABASE_URL is not set[/red]")
        raise typer.Exit(code=1)

    _console.print("[yellow]PRODUCTION DATA CLEANUP[/yellow]")
    _console.print("This will permanently delete ALL user data!")
    _console.print(f"Preserved: admin users, {', '.join(PRESERVED_TABLES)}")
    if not yes and not typer.confirm("Continue?", default=False):
        _console.print("Aborted.")
        raise typer.Exit(code=1)

    try:
        report = asyncio.run(_cleanup_database(url))
    except CleanupError as e:
        _console.print(f"[red]Error during cleanup:[/red] {e.message}")
        raise typer.Exit(code=1)

    _console.print(_render(report))
    if not report.integrity_restored:
        _console.print("[red]Integrity checks could not be re-enabled[/red]")
        raise typer.Exit(code=1)
    _console.print("[green]Production data cleanup completed successfully[/green]")


if __name__ == "__main__":
    app()
