"""
Error taxonomy for the resolution and transaction pipeline.
Every failure a caller can see is one of these kinds.
"""

from typing import Optional


class PipelineError(Exception):
    kind = "Unexpected"
    status_code = 500

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        self.stage = stage
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message, "kind": self.kind}


class InvalidInput(PipelineError):
    kind = "InvalidInput"
    status_code = 400


class InvalidAmount(PipelineError):
    kind = "InvalidAmount"
    status_code = 400


class UnresolvableDestination(PipelineError):
    kind = "UnresolvableDestination"
    status_code = 400


class InvalidDestination(UnresolvableDestination):
    """Not an address, and not shaped like a domain name either."""

    kind = "InvalidDestination"


class UnknownToken(PipelineError):
    kind = "UnknownToken"
    status_code = 400


class QuoteFailed(PipelineError):
    kind = "QuoteFailed"
    status_code = 500


class TransactionBuildFailed(PipelineError):
    kind = "TransactionBuildFailed"
    status_code = 500


class Unexpected(PipelineError):
    kind = "Unexpected"
    status_code = 500


class ProviderError(Exception):
    """Raised by provider adapters; callers decide how it maps to a PipelineError."""

    def __init__(self, message: str, provider: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.body = body
        super().__init__(f"[{provider}] {message}")
