from enum import Enum


class UserRole(str, Enum):
    CLIENT = "client"
    AGENT = "agent"
    ADMIN = "admin"


class ValidationFailure(str, Enum):
    """Closed set of reasons an extension token fails validation.

    The value is the message returned to the extension client.
    """
    NOT_FOUND = "NotFound"
    EXPIRED = "Expired"
    REVOKED = "Revoked"
    DANGLING_USER = "DanglingUser"
