"""ORM Models - SQLAlchemy declarative models for all Qipad entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - User is the owner of every per-user row (wallet, memberships, notifications)

Design Decisions:
    - One file per entity (or tightly coupled pair) for locality
    - All models imported here so Base.metadata is complete before create_all,
      alembic autogenerate and the cleanup command's table registry run
"""

from qipad.models.user import User  # noqa: F401
from qipad.models.wallet import Wallet, WalletTransaction  # noqa: F401
from qipad.models.credit_config import CreditConfig  # noqa: F401
from qipad.models.community import (  # noqa: F401
    Community, CommunityMember, CommunityPost,
)
from qipad.models.project import Project, Investment, Document  # noqa: F401
from qipad.models.connection import Connection  # noqa: F401
from qipad.models.notification import Notification  # noqa: F401
from qipad.models.bidding import BiddingProject, ProjectBid  # noqa: F401
from qipad.models.company import Company  # noqa: F401
from qipad.models.event import Event, EventParticipant  # noqa: F401
from qipad.models.object_acl import ObjectAcl  # noqa: F401
