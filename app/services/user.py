"""
Service layer for user operations.

This module contains the business logic for logging in and out and for the
field staff and partner account lifecycle.
"""

from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select, delete, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import ClientInfo, RequestContext
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import logger
from app.core.security import PasswordManager, TokenManager, utcnow
from app.db.audit import log_action_async
from app.models.amount_request import AmountRequest
from app.models.audit import AuditLog
from app.models.expense import Expense
from app.models.session import UserSession
from app.models.team import Team
from app.models.user import User, UserRole
from app.schemas.user import AccountBase, FieldStaffCreate, Partner, PartnerCreate

BULK = {"synchronize_session": False}


class UserService:
    """Service class for user operations."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    @staticmethod
    async def get_by_username(db: AsyncSession, username: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.username == username))
        return result.scalars().first()

    @staticmethod
    async def authenticate(db: AsyncSession, username: str, password: str) -> Optional[User]:
        """
        Check a username and password.

        Returns:
            User if authentication succeeds, None otherwise
        """
        user = await UserService.get_by_username(db, username)
        if not user:
            logger.warning(f"Authentication failed: User not found - {username}")
            return None
        if not user.is_active:
            logger.warning(f"Authentication failed: Inactive user - {username}")
            return None
        if not PasswordManager.verify_password(password, user.hashed_password):
            logger.warning(f"Authentication failed: Invalid password for user - {username}")
            return None
        return user

    @staticmethod
    async def login(
        db: AsyncSession,
        username: str,
        password: str,
        client: Optional[ClientInfo] = None,
    ) -> Optional[Tuple[str, User]]:
        """
        Authenticate and open a server-side session.

        Args:
            db: Database session
            username: Username
            password: Password
            client: Client details stored on the session

        Returns:
            The access token and user, or None for bad credentials
        """
        client = client or ClientInfo()
        user = await UserService.authenticate(db, username, password)
        if user is None:
            await log_action_async(
                db,
                action="LOGIN_FAILED",
                resource_type="USER",
                details={"username": username},
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
            return None

        expires_delta = timedelta(minutes=settings.security.access_token_expire_minutes)
        session_token = TokenManager.new_session_token()
        try:
            db.add(UserSession(
                user_id=user.id,
                session_token=session_token,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
                expires_at=utcnow() + expires_delta,
            ))
            user.last_login = utcnow()
            await log_action_async(
                db,
                action="LOGIN",
                resource_type="USER",
                resource_id=user.id,
                details={"username": user.username},
                user_id=user.id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(user)
        token = TokenManager.create_access_token(
            subject=user.username,
            session_token=session_token,
            expires_delta=expires_delta,
        )
        logger.info(f"User logged in successfully: {user.username}")
        return token, user

    @staticmethod
    async def logout(db: AsyncSession, token: str, user: User) -> None:
        """Deactivate the session behind ``token``."""
        payload = TokenManager.verify_token(token)
        if payload is None:
            return
        await db.execute(
            update(UserSession)
            .where(UserSession.session_token == payload["jti"], UserSession.user_id == user.id)
            .values(is_active=False, last_activity=func.now()),
            execution_options=BULK,
        )
        await log_action_async(
            db,
            action="LOGOUT",
            resource_type="USER",
            resource_id=user.id,
            user_id=user.id,
        )
        await db.commit()
        logger.info(f"User logged out: {user.username}")

    @staticmethod
    async def _create_account(
        db: AsyncSession,
        ctx: RequestContext,
        account_in: AccountBase,
        role: UserRole,
        team_id: Optional[int],
        client: Optional[ClientInfo],
    ) -> User:
        client = client or ClientInfo()
        if await UserService.get_by_username(db, account_in.username):
            logger.warning(f"Account creation failed: Username already exists - {account_in.username}")
            raise ValidationError("Username already exists")

        if team_id is not None:
            team = (await db.execute(select(Team.id).where(Team.id == team_id))).scalar()
            if team is None:
                raise NotFoundError("Team not found")

        try:
            user = User(
                username=account_in.username,
                hashed_password=PasswordManager.get_password_hash(account_in.password),
                full_name=account_in.full_name,
                email=account_in.email or "",
                role=role.value,
                team_id=team_id,
            )
            db.add(user)
            await db.flush()
            await log_action_async(
                db,
                action="CREATE",
                resource_type="USER",
                resource_id=user.id,
                details={"username": user.username, "role": user.role, "team_id": team_id},
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValidationError("Username already exists")
        except Exception:
            await db.rollback()
            raise

        await db.refresh(user)
        logger.info(f"Created {role.value} account {user.username} with ID: {user.id}")
        return user

    @staticmethod
    async def create_field_staff(
        db: AsyncSession,
        ctx: RequestContext,
        user_in: FieldStaffCreate,
        client: Optional[ClientInfo] = None,
    ) -> User:
        """
        Create a field staff account bound to an existing team.

        Raises:
            ValidationError: If the username is taken
            NotFoundError: If the team does not exist
        """
        return await UserService._create_account(
            db, ctx, user_in, UserRole.FIELD_STAFF, user_in.team_id, client
        )

    @staticmethod
    async def create_partner(
        db: AsyncSession,
        ctx: RequestContext,
        partner_in: PartnerCreate,
        client: Optional[ClientInfo] = None,
    ) -> User:
        return await UserService._create_account(
            db, ctx, partner_in, UserRole.PARTNER, partner_in.team_id, client
        )

    @staticmethod
    async def _delete_account(
        db: AsyncSession,
        ctx: RequestContext,
        user_id: int,
        role: UserRole,
        client: Optional[ClientInfo],
    ) -> None:
        """
        Delete an account of ``role`` that has never recorded an expense.

        The account's own amount requests and sessions are removed; places
        that merely refer to it (approvals, created teams, audit rows) are
        unlinked.
        """
        client = client or ClientInfo()
        label = "partner" if role == UserRole.PARTNER else "user"
        try:
            expense_count = (await db.execute(
                select(func.count(Expense.id)).where(Expense.user_id == user_id)
            )).scalar()
            if expense_count:
                raise ValidationError(
                    f"Cannot delete {label} with existing expenses. Please remove all expenses first."
                )

            user = await UserService.get_by_id(db, user_id)
            if user is None or user.role != role.value:
                if role == UserRole.PARTNER:
                    raise NotFoundError("Partner not found or cannot delete non-partner users")
                raise NotFoundError("User not found or cannot delete admin users")

            await db.execute(delete(AmountRequest).where(AmountRequest.user_id == user_id), execution_options=BULK)
            await db.execute(delete(UserSession).where(UserSession.user_id == user_id), execution_options=BULK)
            await db.execute(
                update(AmountRequest).where(AmountRequest.processed_by == user_id).values(processed_by=None),
                execution_options=BULK,
            )
            await db.execute(
                update(Team).where(Team.created_by == user_id).values(created_by=None),
                execution_options=BULK,
            )
            await db.execute(
                update(AuditLog).where(AuditLog.user_id == user_id).values(user_id=None),
                execution_options=BULK,
            )
            await db.execute(delete(User).where(User.id == user_id), execution_options=BULK)

            await log_action_async(
                db,
                action="DELETE",
                resource_type="USER",
                resource_id=user_id,
                details={"username": user.username, "role": user.role},
                user_id=ctx.user_id,
                ip_address=client.ip_address,
                user_agent=client.user_agent,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Deleted {role.value} account {user_id}")

    @staticmethod
    async def delete_field_staff(
        db: AsyncSession,
        ctx: RequestContext,
        user_id: int,
        client: Optional[ClientInfo] = None,
    ) -> None:
        """
        Delete a field staff account.

        Raises:
            ValidationError: If the user has expenses
            NotFoundError: If there is no such field staff account
        """
        await UserService._delete_account(db, ctx, user_id, UserRole.FIELD_STAFF, client)

    @staticmethod
    async def delete_partner(
        db: AsyncSession,
        ctx: RequestContext,
        partner_id: int,
        client: Optional[ClientInfo] = None,
    ) -> None:
        await UserService._delete_account(db, ctx, partner_id, UserRole.PARTNER, client)

    @staticmethod
    async def list_partners(db: AsyncSession) -> List[Partner]:
        """Partner accounts ordered by full name, with their team name."""
        rows = (await db.execute(
            select(User, Team.name)
            .outerjoin(Team, Team.id == User.team_id)
            .where(User.role == UserRole.PARTNER.value)
            .order_by(User.full_name.asc())
        )).all()
        return [
            Partner.model_validate(user).model_copy(
                update={"team_id": user.team_id, "team_name": team_name if user.team_id else "No Team"}
            )
            for user, team_name in rows
        ]
