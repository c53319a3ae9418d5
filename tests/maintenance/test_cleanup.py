"""Production data cleanup - every user table emptied, system defaults kept.

Invariants:
    - After a run every table in CLEANUP_ORDER is empty
    - Admin users and credit_configs survive
    - A second run deletes nothing
    - A failing step raises CleanupError and rolls back earlier deletes
    - The CLI refuses to run without confirmation
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from typer.testing import CliRunner

from qipad.core.errors import CleanupError
from qipad.db.base import Base
from qipad.maintenance.cleanup import CLEANUP_ORDER, USERS_STEP, app, run_cleanup
from qipad.models import (
    BiddingProject, Community, CommunityMember, CommunityPost, Company,
    Connection, CreditConfig, Document, Event, EventParticipant, Investment,
    Notification, ObjectAcl, Project, ProjectBid, User, Wallet, WalletTransaction,
)


async def seed(database_url: str) -> None:
    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as db:
        admin = User(email="admin@qipad.test", first_name="Ops", last_name="Admin", user_type="admin")
        ada = User(email="ada@example.com", first_name="Ada", last_name="L", user_type="business_owner")
        bob = User(email="bob@example.com", first_name="Bob", last_name="K", user_type="investor")
        db.add_all([admin, ada, bob])
        await db.flush()

        project = Project(
            user_id=ada.id, title="Solar", description="Panels", industry="energy",
            funding_goal=Decimal("1000"), minimum_investment=Decimal("10"),
        )
        community = Community(name="Founders", creator_id=ada.id)
        bidding = BiddingProject(
            user_id=ada.id, title="Logo", description="Design", category="design",
            budget=Decimal("50"), timeline="2 weeks",
        )
        event = Event(organizer_id=ada.id, title="Demo day", starts_at=datetime.now(timezone.utc))
        db.add_all([project, community, bidding, event])
        await db.flush()

        db.add_all([
            Wallet(user_id=ada.id, balance=Decimal("5"), total_earned=Decimal("5"), total_spent=Decimal("0")),
            WalletTransaction(
                user_id=ada.id, type="earn", amount=Decimal("5"),
                balance_before=Decimal("0"), balance_after=Decimal("5"),
            ),
            CreditConfig(action="community_create", cost=Decimal("100")),
            CommunityMember(community_id=community.id, user_id=ada.id, role="creator"),
            CommunityPost(community_id=community.id, author_id=ada.id, content="hello"),
            Connection(requester_id=bob.id, recipient_id=ada.id, project_id=project.id),
            Notification(user_id=ada.id, title="New connection request", message="Bob"),
            Investment(project_id=project.id, investor_id=bob.id, amount=Decimal("10")),
            Document(user_id=ada.id, document_type="identity", file_name="id.png", file_path="/objects/uploads/id"),
            ProjectBid(project_id=bidding.id, user_id=bob.id, amount=Decimal("40"), timeline="1 week", proposal="Me"),
            Company(owner_id=ada.id, name="Ada Ltd"),
            EventParticipant(event_id=event.id, user_id=bob.id),
            ObjectAcl(object_path="uploads/id", owner_id=ada.id),
        ])
        await db.commit()
    await engine.dispose()


async def row_counts(database_url: str) -> dict[str, int]:
    engine = create_async_engine(database_url)
    counts = {}
    async with engine.connect() as conn:
        for table in (*CLEANUP_ORDER, USERS_STEP, "credit_configs"):
            counts[table] = (await conn.execute(text(f"SELECT COUNT(*) FROM {table}"))).scalar_one()
    await engine.dispose()
    return counts


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'qipad.db'}"


async def test_cleanup_empties_user_data(database_url):
    await seed(database_url)
    engine = create_async_engine(database_url)

    report = await run_cleanup(engine)
    await engine.dispose()

    counts = await row_counts(database_url)
    assert all(counts[table] == 0 for table in CLEANUP_ORDER)
    assert counts[USERS_STEP] == 1
    assert counts["credit_configs"] == 1
    assert report.deleted[USERS_STEP] == 2
    assert report.deleted["communities"] == 1
    assert report.integrity_restored
    assert list(report.deleted) == [*CLEANUP_ORDER, USERS_STEP]


async def test_second_run_deletes_nothing(database_url):
    await seed(database_url)
    engine = create_async_engine(database_url)

    await run_cleanup(engine)
    again = await run_cleanup(engine)
    await engine.dispose()

    assert again.total == 0


async def test_failing_step_rolls_back(database_url):
    await seed(database_url)
    engine = create_async_engine(database_url)
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE events"))

    with pytest.raises(CleanupError) as exc:
        await run_cleanup(engine)
    await engine.dispose()

    assert exc.value.table == "events"
    engine = create_async_engine(database_url)
    async with engine.connect() as conn:
        notifications = (await conn.execute(text("SELECT COUNT(*) FROM notifications"))).scalar_one()
        users = (await conn.execute(text("SELECT COUNT(*) FROM users"))).scalar_one()
    await engine.dispose()
    assert notifications == 1
    assert users == 3


def test_cli_requires_confirmation(database_url):
    asyncio.run(seed(database_url))

    result = CliRunner().invoke(app, ["--database-url", database_url], input="n\n")

    assert result.exit_code == 1
    assert "Aborted" in result.output
    assert asyncio.run(row_counts(database_url))["users"] == 3


def test_cli_runs_with_yes(database_url):
    asyncio.run(seed(database_url))

    result = CliRunner().invoke(app, ["--database-url", database_url, "--yes"])

    assert result.exit_code == 0, result.output
    assert "completed successfully" in result.output
    assert asyncio.run(row_counts(database_url))["users"] == 1


def test_cli_reports_failure(tmp_path):
    missing = f"sqlite+aiosqlite:///{tmp_path / 'nothing.db'}"

    result = CliRunner().invoke(app, ["--database-url", missing, "-y"])

    assert result.exit_code == 1
    assert "Error during cleanup" in result.output
