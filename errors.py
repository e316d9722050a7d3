"""Shared error codes, user-facing messages and exceptions."""

from __future__ import annotations

PERMISSION_DENIED = "PERMISSION_DENIED"
DEVICE_ERROR = "DEVICE_ERROR"
INVALID_ARGUMENT = "INVALID_ARGUMENT"

ERROR_MESSAGES = {
    PERMISSION_DENIED: "Microphone access is required to record.",
    DEVICE_ERROR: "The audio device failed, please retry.",
    INVALID_ARGUMENT: "That recording no longer exists.",
}


class VoiceMemoError(Exception):
    code = DEVICE_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or ERROR_MESSAGES[self.code])
        self.message = message or ERROR_MESSAGES[self.code]

    @property
    def user_message(self) -> str:
        return ERROR_MESSAGES[self.code]


class PermissionDenied(VoiceMemoError):
    code = PERMISSION_DENIED


class DeviceError(VoiceMemoError):
    code = DEVICE_ERROR


class InvalidArgument(VoiceMemoError):
    code = INVALID_ARGUMENT
