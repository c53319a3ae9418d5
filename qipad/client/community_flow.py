"""Community Creation Flow - client pre-flight checks, then one transactional POST.

Invariants:
    - hasEnoughCredits false -> no creation request, "Insufficient Credits" toast
    - session user not KYC-complete -> no creation request, no deduction,
      "KYC verification required" toast
    - Otherwise exactly one POST /api/communities; the server checks KYC and
      credits again, deducts and creates in one transaction
    - The create_community mutation owns invalidation and the success toast
    - A server-side KYC or credit rejection maps to the same outcome and
      toast as the matching pre-flight failure, after the mutation's own
      error toast

Design Decisions:
    - Pre-flight checks only improve the message; correctness comes from the
      server transaction, so a server 400/403 is surfaced the same way
"""

import logging
from dataclasses import dataclass
from typing import Any

from qipad.client.api_request import ApiClient, parse_json
from qipad.client.auth_context import AuthContext
from qipad.client.mutations import Mutation, MutationResult, build_mutation
from qipad.client.notifier import Notifier
from qipad.client.query_client import QueryClient
from qipad.core.domain_types import CreditAction
from qipad.core.errors import ApiRequestError

logger = logging.getLogger(__name__)

INSUFFICIENT_CREDITS = "Insufficient Credits"
KYC_REQUIRED = "KYC verification required"


@dataclass
class FlowOutcome:
    status: str  # "created" | "insufficient_credits" | "kyc_required" | "failed"
    community: Any = None
    credit_check: dict | None = None
    error: ApiRequestError | None = None

    @property
    def created(self) -> bool:
        return self.status == "created"


class CommunityCreationFlow:

    def __init__(
        self,
        api: ApiClient,
        queries: QueryClient,
        notifier: Notifier,
        auth: AuthContext,
    ):
        self.api = api
        self.notifier = notifier
        self.auth = auth
        self.mutation: Mutation = build_mutation(
            "create_community", api, queries, notifier,
        )

    async def check_credits(self) -> dict:
        response = await self.api.request(
            "POST", "/api/credits/check",
            json={"action": CreditAction.COMMUNITY_CREATE.value},
        )
        return parse_json(response)

    @staticmethod
    def _rejection(error: ApiRequestError | None) -> str:
        if error is None:
            return "failed"
        code = None
        if isinstance(error.payload, dict) and isinstance(error.payload.get("error"), dict):
            code = error.payload["error"].get("code")
        if error.status == 403 and code in (None, "KYC_REQUIRED"):
            return "kyc_required"
        if error.status == 400 and code == "INSUFFICIENT_CREDITS":
            return "insufficient_credits"
        return "failed"

    async def run(
        self,
        name: str,
        description: str | None = None,
        category: str = "networking",
        is_private: bool = False,
    ) -> FlowOutcome:
        try:
            check = await self.check_credits()
        except ApiRequestError as e:
            self.notifier.error("Failed to check credits", e.server_message)
            return FlowOutcome(status="failed", error=e)

        if not check.get("hasEnoughCredits"):
            self.notifier.error(
                INSUFFICIENT_CREDITS,
                f"You need {check.get('requiredCredits')} credits to create a "
                f"community. Current balance: {check.get('currentBalance')}",
            )
            return FlowOutcome(status="insufficient_credits", credit_check=check)

        user = self.auth.user or {}
        if not user.get("isKycComplete"):
            self.notifier.error(
                KYC_REQUIRED,
                "Only KYC-verified members can create communities",
            )
            return FlowOutcome(status="kyc_required", credit_check=check)

        result: MutationResult = await self.mutation.mutate({
            "name": name,
            "description": description,
            "category": category,
            "isPrivate": is_private,
        })
        if not result.ok:
            status = self._rejection(result.error)
            if status == "kyc_required":
                self.notifier.error(KYC_REQUIRED, result.error.server_message)
            elif status == "insufficient_credits":
                self.notifier.error(INSUFFICIENT_CREDITS, result.error.server_message)
            return FlowOutcome(status=status, credit_check=check, error=result.error)

        await self.auth.refresh_user()
        return FlowOutcome(status="created", community=result.data, credit_check=check)
