"""Session gate: turns credentials into an authorized moderator or a denial.

Every failure after sign-in fails closed: if the profile or the allowlist
cannot be read, the caller is denied rather than asked to retry.
"""
import logging
from typing import Protocol

from pydantic import ValidationError as SchemaError

from control_panel.core.errors import AuthError, NoRowsError, StoreError
from control_panel.core.validation import validate_credentials
from control_panel.crud import user as user_crud
from control_panel.db.store import RecordStore
from control_panel.schemas.user import Identity, ModeratorSession, SessionOutcome, SessionStatus

logger = logging.getLogger(__name__)


class AuthProvider(Protocol):
    async def sign_in(self, email: str, password: str) -> Identity: ...

    async def sign_out(self, session: ModeratorSession) -> None: ...


def _denied(message: str) -> SessionOutcome:
    return SessionOutcome(status=SessionStatus.ACCESS_DENIED, message=message)


async def authenticate(auth: AuthProvider, store: RecordStore, email: str, password: str) -> SessionOutcome:
    """
    Sign in and check moderator allowlist membership.

    Raises:
        ValidationError: If email or password is empty. No collaborator is called.

    Returns:
        SessionOutcome with status authorized, auth_error or access_denied
    """
    email, password = validate_credentials(email, password)

    logger.info(f"Attempting to sign in: {email}")
    try:
        user = await auth.sign_in(email, password)
    except AuthError as e:
        logger.warning(f"Authentication failed for {email}: {e.message}")
        return SessionOutcome(status=SessionStatus.AUTH_ERROR, message=e.message)

    logger.info(f"Checking moderator status for: {user.email}")
    try:
        profile = await user_crud.get_profile(store, user.id)
    except (StoreError, SchemaError) as e:
        logger.error(f"Error loading profile for {user.id}: {e}")
        return _denied("Could not load your profile")

    try:
        await user_crud.get_allowed_moderator(store, profile.artist_name)
    except NoRowsError:
        logger.info(f"User is not a moderator: {profile.artist_name}")
        return _denied("You are not an allowed moderator")
    except StoreError as e:
        logger.error(f"Error checking moderator status for {profile.artist_name}: {e}")
        return _denied("Could not verify moderator status")

    logger.info(f"User is a moderator: {profile.artist_name}")
    return SessionOutcome(status=SessionStatus.AUTHORIZED, user=user, artist_name=profile.artist_name)


async def sign_out(auth: AuthProvider, session: ModeratorSession) -> None:
    """End a moderator session. AuthError from the provider propagates."""
    logger.info(f"Logging out: {session.artist_name}")
    await auth.sign_out(session)
