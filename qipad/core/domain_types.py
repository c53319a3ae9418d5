"""Domain Types - enums and identity types shared by the API, services and client.

Invariants:
    - UserId, CommunityId wrap UUIDs
    - All valid states encoded as str Enums that serialize to JSON as their value
    - DEFAULT_CREDIT_COSTS covers every CreditAction

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
"""

from decimal import Decimal
from enum import Enum
from typing import NewType
from uuid import UUID


# --- Identity Types ----------------------------------------------

UserId = NewType("UserId", UUID)
CommunityId = NewType("CommunityId", UUID)


# --- Enums -------------------------------------------------------

class UserType(str, Enum):
    """Account kinds. ADMIN rows survive the production cleanup."""
    BUSINESS_OWNER = "business_owner"
    INVESTOR = "investor"
    INDIVIDUAL = "individual"
    ADMIN = "admin"


class KycStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class CreditAction(str, Enum):
    """Actions that cost credits."""
    INNOVATION = "innovation"
    JOB = "job"
    INVESTOR_CONNECTION = "investor_connection"
    COMMUNITY_CREATE = "community_create"
    COMMUNITY_JOIN = "community_join"
    EVENT = "event"


class TransactionType(str, Enum):
    EARN = "earn"
    SPEND = "spend"


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class MemberRole(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"
    CREATOR = "creator"
    BANNED = "banned"


class CommunityCategory(str, Enum):
    NETWORKING = "networking"
    TECHNOLOGY = "technology"
    FINANCE = "finance"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    GENERAL = "general"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


DEFAULT_CREDIT_COSTS: dict[CreditAction, Decimal] = {
    CreditAction.INNOVATION: Decimal("100"),
    CreditAction.JOB: Decimal("50"),
    CreditAction.INVESTOR_CONNECTION: Decimal("10"),
    CreditAction.COMMUNITY_CREATE: Decimal("100"),
    CreditAction.COMMUNITY_JOIN: Decimal("10"),
    CreditAction.EVENT: Decimal("50"),
}
