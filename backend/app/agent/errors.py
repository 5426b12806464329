class RelayError(Exception):
    """Base error for a failed mentor chat turn. `message` is safe to show to the caller."""

    status_code = 500
    code = "internal_error"
    default_message = "Unknown error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message, "code": self.code}


class RelayInputError(RelayError):
    code = "invalid_input"
    default_message = "Missing required fields"


class RelayConfigError(RelayError):
    code = "config_error"
    default_message = "LLM_API_KEY is not configured"


class RelayRateLimitError(RelayError):
    status_code = 429
    code = "rate_limited"
    default_message = "Rate limit exceeded. Please try again later."


class RelayQuotaError(RelayError):
    status_code = 402
    code = "credits_exhausted"
    default_message = "AI credits depleted. Please add credits to your workspace."


class RelayUpstreamError(RelayError):
    code = "upstream_error"
    default_message = "AI gateway error"


_ERRORS_BY_CODE: dict[str, type[RelayError]] = {
    cls.code: cls
    for cls in (
        RelayInputError,
        RelayConfigError,
        RelayRateLimitError,
        RelayQuotaError,
        RelayUpstreamError,
    )
}


def error_from_response(status_code: int, payload: dict | None) -> RelayError:
    """Rebuild the relay error described by an HTTP error response."""
    payload = payload or {}
    message = payload.get("error") if isinstance(payload.get("error"), str) else None
    error_cls = _ERRORS_BY_CODE.get(str(payload.get("code")))
    if error_cls is None:
        if status_code == RelayRateLimitError.status_code:
            error_cls = RelayRateLimitError
        elif status_code == RelayQuotaError.status_code:
            error_cls = RelayQuotaError
        else:
            error_cls = RelayError
    return error_cls(message)
