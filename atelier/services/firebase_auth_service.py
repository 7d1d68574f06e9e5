"""Federated sign-in through Firebase ID tokens"""

import logging
from dataclasses import dataclass
from typing import Optional
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from atelier.api.errors import AuthenticationError, UpstreamError, ValidationError
from atelier.config import settings
from atelier.models import User, UserRole, UserSession
from atelier.services.auth_service import AuthService

logger = logging.getLogger(__name__)


@dataclass
class FederatedIdentity:
    """Identity asserted by the external provider"""
    uid: str
    email: Optional[str]
    name: Optional[str] = None
    picture: Optional[str] = None


class FirebaseAuthService:
    """Verifies Firebase ID tokens and maps them onto local users"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.project_id = settings.firebase_project_id

    def _verify(self, token: str) -> dict:
        return id_token.verify_firebase_token(
            token,
            google_requests.Request(),
            audience=self.project_id,
        )

    async def verify_token(self, token: str) -> FederatedIdentity:
        """
        Verify an ID token with Google's public keys

        Raises:
            AuthenticationError: If the token is invalid or expired
            UpstreamError: If the provider can't be reached or isn't configured
        """
        if not self.project_id:
            raise UpstreamError("Federated sign-in is not configured")

        try:
            claims = await run_in_threadpool(self._verify, token)
        except google_exceptions.TransportError as e:
            logger.error(f"Could not reach identity provider: {e}")
            raise UpstreamError("Could not reach the identity provider, please try again later")
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.warning(f"Rejected federated token: {e}")
            raise AuthenticationError("Invalid or expired identity token")

        return FederatedIdentity(
            uid=claims.get("user_id") or claims["sub"],
            email=claims.get("email"),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )

    async def get_or_create_user(self, identity: FederatedIdentity) -> User:
        """
        Find the local account for a federated identity, creating it on first sight

        An existing account with the same email is linked rather than
        duplicated, and marked verified since the provider verified the email.
        A password set on an account whose email was never confirmed is
        discarded together with its sessions: whoever registered it did not
        prove they own the address.
        """
        if not identity.email:
            raise ValidationError("The identity provider did not share an email address")

        email = identity.email.lower()

        result = await self.db.execute(select(User).where(User.firebase_uid == identity.uid))
        user = result.scalar_one_or_none()

        if user is None:
            result = await self.db.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

        if user is not None:
            changed = False
            if not user.firebase_uid:
                user.firebase_uid = identity.uid
                changed = True
            if not user.verified:
                user.verified = True
                user.verification_token = None
                user.verification_expires = None
                user.password_hash = None
                await self.db.execute(delete(UserSession).where(UserSession.user_id == user.id))
                changed = True
            if changed:
                await self.db.commit()
                await self.db.refresh(user)
                logger.info(f"Linked federated identity to user {user.id}")
            return user

        username = await AuthService.unique_username(self.db, email)
        user = User(
            username=username,
            email=email,
            password_hash=None,
            name=identity.name or username,
            role=UserRole.CLIENT.value,
            firebase_uid=identity.uid,
            avatar_url=identity.picture,
            verified=True,
            preferences={},
        )
        await AuthService.save_new_user(self.db, user)
        logger.info(f"Created user {user.id} from federated sign-in")
        return user
