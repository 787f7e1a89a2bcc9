"""Credential exchange against the hosted users collection."""
import logging

from control_panel.core.errors import AuthError, NoRowsError, StoreError
from control_panel.core.security import verify_password
from control_panel.crud import user as user_crud
from control_panel.db.store import RecordStore
from control_panel.schemas.user import Identity, ModeratorSession, UserInDB

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


class MongoAuthProvider:
    """Auth collaborator: exchanges email/password for an identity.

    Sessions themselves are stateless signed tokens, so signing out only
    has to be recorded here.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    async def sign_in(self, email: str, password: str) -> Identity:
        try:
            row = await user_crud.get_user_by_email(self.store, email)
        except NoRowsError:
            logger.warning(f"Sign-in for unknown email {email}")
            raise AuthError(INVALID_CREDENTIALS)
        except StoreError as e:
            raise AuthError(e.message) from e

        user = UserInDB(**row)
        if not verify_password(password, user.hashed_password):
            logger.warning(f"Wrong password for {email}")
            raise AuthError(INVALID_CREDENTIALS)

        if not user.is_active:
            logger.warning(f"Inactive user sign-in attempt: {email}")
            raise AuthError("Account is deactivated")

        return Identity(id=user.id, email=user.email)

    async def sign_out(self, session: ModeratorSession) -> None:
        logger.info(f"Session ended for moderator {session.artist_name}")
