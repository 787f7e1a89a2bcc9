"""Error taxonomy shared by the session gate, the catalog repository and the approval engine."""
from typing import Optional


class ControlPanelError(Exception):
    """Base class for every error reported back to a moderator."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ControlPanelError):
    """Bad local input. Raised before any collaborator is contacted."""
    pass


class AuthError(ControlPanelError):
    """The auth provider rejected the credentials or the sign-out."""
    pass


class AccessDenied(ControlPanelError):
    """The caller is not an allowlisted moderator, or their profile could not be read."""
    pass


class NotFoundError(ControlPanelError):
    """A referenced pending track does not exist."""
    pass


class StoreError(ControlPanelError):
    """Any record store failure, passed through unchanged."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class NoRowsError(StoreError):
    """The store's signal that a single-row read matched nothing."""
    pass


class ConflictError(StoreError):
    """Insert rejected because the id already exists in the collection."""
    pass


class OrphanError(ControlPanelError):
    """The track was published but the pending record could not be deleted.

    Both records stay visible until someone reconciles them by hand.
    """

    def __init__(self, published_id: str, pending_id: str, cause: Exception):
        super().__init__(
            f"Track {pending_id} was published as {published_id} "
            f"but could not be removed from the pending queue: {cause}"
        )
        self.published_id = published_id
        self.pending_id = pending_id
        self.cause = cause
