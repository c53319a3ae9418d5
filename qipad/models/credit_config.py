"""CreditConfig ORM - admin-tunable credit cost per action.

Invariants:
    - At most one row per action
    - System default data: survives the production cleanup
    - Missing or inactive rows fall back to DEFAULT_CREDIT_COSTS
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Boolean, Numeric, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from qipad.db.base import Base


class CreditConfig(Base):
    __tablename__ = "credit_configs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    cost: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
