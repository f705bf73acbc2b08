"""
Stripe Connect Service.

Creator payout onboarding with Stripe Express accounts.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from snack.backend.core.config import get_app_config
from snack.backend.core.utils import utc_now
from snack.backend.integrations.stripe_gateway import StripeGateway
from snack.backend.models.user import StripeAccountStatus, User
from snack.backend.repositories.user import UserRepository
from snack.backend.services.base import BaseService


class StripeConnectService(BaseService):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)

    async def start_onboarding(
        self,
        user: User,
        gateway: StripeGateway,
        return_url: str | None = None,
        refresh_url: str | None = None,
    ) -> tuple[str, str]:
        """
        Create the creator's Express account if needed and an onboarding link.

        Returns:
            Tuple of (onboarding url, account id)
        """
        account_id = user.stripe_account_id
        if not account_id:
            account_id = await gateway.create_express_account(
                email=user.email,
                metadata={"user_id": user.id},
            )
            self._log_operation("Connect account created", user_id=user.id, account_id=account_id)
            await self._execute_db_operation(
                "store_connect_account",
                self.users.update(
                    user.id,
                    stripe_account_id=account_id,
                    stripe_account_status=StripeAccountStatus.PENDING,
                    stripe_connected_at=utc_now(),
                ),
            )

        base_url = get_app_config().application.public_url.rstrip("/")
        url = await gateway.create_account_link(
            account_id,
            refresh_url=refresh_url or f"{base_url}/dashboard/earnings?refresh=true",
            return_url=return_url or f"{base_url}/dashboard/earnings?success=true",
        )
        return url, account_id

    async def get_status(self, user: User, gateway: StripeGateway) -> dict[str, Any]:
        """Connection status, refreshed from Stripe when an account exists."""
        if not user.stripe_account_id:
            return {"connected": False, "status": StripeAccountStatus.NOT_CONNECTED}

        state = await gateway.retrieve_account(user.stripe_account_id)
        status = StripeAccountStatus.ACTIVE if state.is_active else StripeAccountStatus.PENDING
        if status != user.stripe_account_status:
            self._log_operation("Connect status changed", user_id=user.id, status=status)
            await self.users.update(user.id, stripe_account_status=status)

        return {
            "connected": True,
            "status": status,
            "charges_enabled": state.charges_enabled,
            "payouts_enabled": state.payouts_enabled,
            "details_submitted": state.details_submitted,
        }
