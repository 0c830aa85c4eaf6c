"""Error taxonomy shared by the relay components and the HTTP layer."""
from __future__ import annotations

from typing import Optional


class VoiceRelayError(Exception):
    status_code: int = 500
    code: str = "relay_error"

    def __init__(self, message: str, *, cause: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_payload(self) -> dict:
        payload = {"detail": self.message, "code": self.code}
        if self.cause:
            payload["cause"] = self.cause
        return payload


# client input
class UploadRejectedError(VoiceRelayError):
    status_code = 400
    code = "upload_rejected"


class UnsupportedAudioTypeError(UploadRejectedError):
    code = "unsupported_file_type"


class UploadTooLargeError(UploadRejectedError):
    status_code = 413
    code = "file_too_large"


# configuration
class ServiceNotConfiguredError(VoiceRelayError):
    code = "service_not_configured"


# upstream
class TranscriptionError(VoiceRelayError):
    code = "transcription_failed"


class IntentClassificationError(VoiceRelayError):
    code = "intent_parsing_failed"


class DispatchError(VoiceRelayError):
    code = "workflow_execution_failed"


class SynthesisError(VoiceRelayError):
    code = "synthesis_failed"
