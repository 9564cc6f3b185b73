"""
Errors surfaced to callable endpoint clients.

The codes follow the Firebase callable-function protocol so mobile clients
can keep switching on the same values they used with Cloud Functions.
"""

from typing import Dict

UNAUTHENTICATED = "unauthenticated"
INVALID_ARGUMENT = "invalid-argument"
PERMISSION_DENIED = "permission-denied"
NOT_FOUND = "not-found"
INTERNAL = "internal"

STATUS_BY_CODE: Dict[str, int] = {
    UNAUTHENTICATED: 401,
    INVALID_ARGUMENT: 400,
    PERMISSION_DENIED: 403,
    NOT_FOUND: 404,
    INTERNAL: 500,
}


class CallableError(Exception):
    def __init__(self, code: str, message: str):
        if code not in STATUS_BY_CODE:
            raise ValueError(f"Unknown callable error code: {code}")
        super().__init__(message)
        self.code = code
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE[self.code]

    @property
    def status(self) -> str:
        # "permission-denied" -> "PERMISSION_DENIED"
        return self.code.replace("-", "_").upper()

    def to_payload(self) -> dict:
        return {"error": {"status": self.status, "message": self.message}}

    @classmethod
    def unauthenticated(cls, message: str = "User is not authenticated"):
        return cls(UNAUTHENTICATED, message)

    @classmethod
    def invalid_argument(cls, message: str):
        return cls(INVALID_ARGUMENT, message)

    @classmethod
    def permission_denied(cls, message: str):
        return cls(PERMISSION_DENIED, message)

    @classmethod
    def not_found(cls, message: str):
        return cls(NOT_FOUND, message)

    @classmethod
    def internal(cls, message: str = "An internal error occurred"):
        return cls(INTERNAL, message)
