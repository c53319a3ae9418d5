"""Marketplace Service - innovation projects, bidding, companies and events.

Invariants:
    - Projects, bids and events are KYC-gated (KycRequiredError before any write)
    - New projects start pending and are listed publicly only once approved
    - Only a project's owner may update or delete it
    - Bids go to open bidding projects, never the bidder's own, one per bidder;
      the project owner is notified in the same commit

Design Decisions:
    - Listing fees are charged by the client through /api/credits/deduct;
      these writes never touch the wallet
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from qipad.core.errors import (
    ConflictError, KycRequiredError, PermissionDeniedError,
    ResourceNotFoundError, ValidationError,
)
from qipad.models.bidding import BiddingProject, ProjectBid
from qipad.models.company import Company
from qipad.models.event import Event
from qipad.models.notification import Notification
from qipad.models.project import Project
from qipad.models.user import User
from qipad.schemas.marketplace import (
    BidCreate, BiddingProjectCreate, CompanyCreate, EventCreate,
    ProjectCreate, ProjectUpdate,
)

logger = logging.getLogger(__name__)


async def _get(db: AsyncSession, model, resource: str, resource_id: UUID):
    row = await db.get(model, resource_id)
    if row is None:
        raise ResourceNotFoundError(resource, str(resource_id))
    return row


class ProjectService:
    """Innovation projects seeking investment."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_approved(self) -> list[Project]:
        result = await self.db.execute(
            select(Project)
            .where(Project.status == "approved")
            .order_by(Project.created_at.desc()),
        )
        return list(result.scalars().all())

    async def list_for_owner(self, user_id: UUID) -> list[Project]:
        result = await self.db.execute(
            select(Project)
            .where(Project.user_id == user_id)
            .order_by(Project.created_at.desc()),
        )
        return list(result.scalars().all())

    async def get(self, project_id: UUID) -> Project:
        return await _get(self.db, Project, "Project", project_id)

    async def create(self, user: User, body: ProjectCreate) -> Project:
        if not user.is_kyc_complete:
            raise KycRequiredError("create projects")
        if body.minimum_investment > body.funding_goal:
            raise ValidationError(
                "Minimum investment cannot exceed the funding goal",
                field="minimumInvestment",
            )
        project = Project(user_id=user.id, status="pending", **body.model_dump())
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        logger.info(f"Project created: {project.id}", extra={"user_id": str(user.id)})
        return project

    async def _owned(self, project_id: UUID, user: User, verb: str) -> Project:
        project = await self.get(project_id)
        if project.user_id != user.id:
            raise PermissionDeniedError(f"Not authorized to {verb} this project")
        return project

    async def update(
        self, project_id: UUID, user: User, body: ProjectUpdate,
    ) -> Project:
        project = await self._owned(project_id, user, "update")
        changes = {
            k: v for k, v in body.model_dump(exclude_unset=True).items()
            if v is not None
        }
        minimum = changes.get("minimum_investment", project.minimum_investment)
        if minimum > changes.get("funding_goal", project.funding_goal):
            raise ValidationError(
                "Minimum investment cannot exceed the funding goal",
                field="minimumInvestment",
            )
        for name, value in changes.items():
            setattr(project, name, value)
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def delete(self, project_id: UUID, user: User) -> None:
        project = await self._owned(project_id, user, "delete")
        await self.db.delete(project)
        await self.db.commit()
        logger.info(f"Project deleted: {project_id}", extra={"user_id": str(user.id)})

    async def set_status(self, project_id: UUID, status: str) -> Project:
        """Admin moderation: approve or reject a pending project."""
        project = await self.get(project_id)
        project.status = status
        self.db.add(Notification(
            user_id=project.user_id,
            title=f"Project {status}",
            message=f"Your project '{project.title}' was {status}",
            type="project",
        ))
        await self.db.commit()
        await self.db.refresh(project)
        return project


class BiddingService:
    """Service-provider marketplace: posted projects and bids on them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_projects(self) -> list[BiddingProject]:
        result = await self.db.execute(
            select(BiddingProject).order_by(BiddingProject.created_at.desc()),
        )
        return list(result.scalars().all())

    async def get_project(self, project_id: UUID) -> BiddingProject:
        return await _get(self.db, BiddingProject, "Bidding project", project_id)

    async def create_project(
        self, user: User, body: BiddingProjectCreate,
    ) -> BiddingProject:
        project = BiddingProject(user_id=user.id, **body.model_dump())
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def list_bids(self, project_id: UUID) -> list[ProjectBid]:
        await self.get_project(project_id)
        result = await self.db.execute(
            select(ProjectBid)
            .where(ProjectBid.project_id == project_id)
            .order_by(ProjectBid.amount.asc()),
        )
        return list(result.scalars().all())

    async def submit_bid(self, user: User, body: BidCreate) -> ProjectBid:
        if not user.is_kyc_complete:
            raise KycRequiredError("submit bids")
        project = await self.get_project(body.project_id)
        if project.user_id == user.id:
            raise ValidationError("Cannot bid on your own project", field="projectId")
        if project.status != "open":
            raise ConflictError("This project is no longer accepting bids")
        existing = await self.db.execute(
            select(ProjectBid.id).where(
                ProjectBid.project_id == project.id,
                ProjectBid.user_id == user.id,
            ).limit(1),
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("You have already bid on this project")

        bid = ProjectBid(user_id=user.id, **body.model_dump())
        self.db.add(bid)
        self.db.add(Notification(
            user_id=project.user_id,
            title="New bid received",
            message=f"{user.first_name} {user.last_name} bid on '{project.title}'",
            type="bid",
        ))
        await self.db.commit()
        await self.db.refresh(bid)
        logger.info(f"Bid submitted: {bid.id}", extra={"user_id": str(user.id)})
        return bid


class CompanyService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_companies(self) -> list[Company]:
        result = await self.db.execute(
            select(Company).order_by(Company.created_at.desc()),
        )
        return list(result.scalars().all())

    async def create(self, user: User, body: CompanyCreate) -> Company:
        company = Company(owner_id=user.id, **body.model_dump())
        self.db.add(company)
        await self.db.commit()
        await self.db.refresh(company)
        return company


class EventService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_events(self) -> list[Event]:
        result = await self.db.execute(select(Event).order_by(Event.starts_at.asc()))
        return list(result.scalars().all())

    async def get(self, event_id: UUID) -> Event:
        return await _get(self.db, Event, "Event", event_id)

    async def create(self, user: User, body: EventCreate) -> Event:
        if not user.is_kyc_complete:
            raise KycRequiredError("create events")
        event = Event(organizer_id=user.id, **body.model_dump())
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)
        logger.info(f"Event created: {event.id}", extra={"user_id": str(user.id)})
        return event
