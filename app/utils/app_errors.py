"""Application error types shared by the realtime domain and the HTTP layer."""

import sys
from enum import Enum, IntEnum
from uuid import uuid4


class HttpStatusCode(IntEnum):
    OK = 200
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    UNPROCESSABLE_ENTITY = 422
    INTERNAL_SERVER_ERROR = 500


class AppErrorCode(str, Enum):
    E_INTERNAL_ERROR = "E_INTERNAL_ERROR"
    E_INVALID_PARAMS = "E_INVALID_PARAMS"
    E_CONFIG = "E_CONFIG"

    # Connection authentication
    E_MISSING_TOKEN = "E_MISSING_TOKEN"
    E_BAD_TOKEN = "E_BAD_TOKEN"
    E_TOKEN_EXPIRED = "E_TOKEN_EXPIRED"
    E_NO_SUBJECT = "E_NO_SUBJECT"

    # Realtime signaling
    E_UNKNOWN_EVENT = "E_UNKNOWN_EVENT"
    E_INVALID_TRANSITION = "E_INVALID_TRANSITION"

    def __str__(self) -> str:
        return self.value


class AppError(Exception):
    """Error carrying an errcode, a message and the HTTP status it maps to.

    The caller location is captured at construction so handlers can log where
    the error was raised rather than where it was caught.
    """

    def __init__(
        self,
        errcode: AppErrorCode | str,
        errmesg: str,
        status_code: HttpStatusCode | int = HttpStatusCode.BAD_REQUEST,
    ):
        self.errcode = errcode.value if isinstance(errcode, AppErrorCode) else str(errcode)
        self.errmesg = errmesg
        self.status_code = int(status_code)
        self.erresid = uuid4().hex[:10]

        # Only the immediate caller's frame; no source context is read.
        caller = sys._getframe(1)
        module_name = caller.f_globals.get("__name__") or caller.f_code.co_filename
        self.caller_info = f"{module_name}:{caller.f_code.co_name}:{caller.f_lineno}"

        super().__init__(f"{self.errcode}: {errmesg}")
