"""Authorization policy for handler actions."""
from bloodbridge.constants import UserRole
from bloodbridge.models.blood_request import BloodRequest
from bloodbridge.models.notification import Notification
from bloodbridge.models.user import User

UPDATE_REQUEST_STATUS = "request:update_status"
UPDATE_REQUEST_UNITS = "request:update_units"
CLOSE_REQUEST = "request:close"
READ_NOTIFICATION = "notification:read"
DELETE_NOTIFICATION = "notification:delete"
CREATE_HOSPITAL = "hospital:create"

_REQUESTER_ACTIONS = {UPDATE_REQUEST_STATUS, UPDATE_REQUEST_UNITS, CLOSE_REQUEST}
_RECIPIENT_ACTIONS = {READ_NOTIFICATION, DELETE_NOTIFICATION}


def is_admin(actor: User | None) -> bool:
    return actor is not None and actor.role == UserRole.ADMIN.value


def authorize(actor: User | None, action: str, resource=None) -> bool:
    """Decide whether ``actor`` may perform ``action`` on ``resource``.

    Admins may do anything. Request mutations belong to the requester,
    notifications to their recipient. Hospital creation and unknown
    actions are admin only.
    """
    if actor is None:
        return False
    if is_admin(actor):
        return True

    if action in _REQUESTER_ACTIONS:
        return isinstance(resource, BloodRequest) and resource.requester_id == actor.id

    if action in _RECIPIENT_ACTIONS:
        return isinstance(resource, Notification) and resource.user_id == actor.id

    return False
