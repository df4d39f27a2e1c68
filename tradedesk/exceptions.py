class AppError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, resource: str, resource_id: str):
        super().__init__(f"{resource} '{resource_id}' not found", code="NOT_FOUND")


class ValidationError(AppError):
    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class ConfigurationError(AppError):
    def __init__(self, setting: str, purpose: str):
        super().__init__(
            f"{setting} is not configured; it is required for {purpose}",
            code="CONFIGURATION_ERROR",
        )


class UpstreamError(AppError):
    def __init__(self, source: str, message: str, code: str = "UPSTREAM_ERROR"):
        self.source = source
        super().__init__(f"{source}: {message}", code=code)


class RateLimitError(UpstreamError):
    def __init__(self, source: str, message: str = "rate limit reached"):
        super().__init__(source, message, code="RATE_LIMITED")


class UpstreamTimeoutError(UpstreamError):
    def __init__(self, source: str, timeout: float):
        super().__init__(source, f"no response within {timeout:g}s", code="UPSTREAM_TIMEOUT")
