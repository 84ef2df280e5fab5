"""RFC 9457 Problem Details exception hierarchy.

All API errors extend ProblemDetailError and are converted to
application/problem+json responses by the exception handler middleware.
"""

PROBLEM_BASE_URI = "https://api.sleepjournal.app/problems"


class ProblemDetailError(Exception):
    def __init__(
        self,
        type_uri: str,
        title: str,
        status: int,
        detail: str,
        violations: list[dict] | None = None,
    ):
        self.type_uri = type_uri
        self.title = title
        self.status = status
        self.detail = detail
        self.violations = violations
        super().__init__(detail)


class ValidationError(ProblemDetailError):
    def __init__(self, violations: list[dict]):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/validation-error",
            title="Validation Error",
            status=422,
            detail=f"Request body contains {len(violations)} validation error(s)",
            violations=violations,
        )


class NotFoundError(ProblemDetailError):
    def __init__(self, detail: str):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/not-found",
            title="Not Found",
            status=404,
            detail=detail,
        )


class InvalidDateRangeError(ProblemDetailError):
    def __init__(self, start: str, end: str, reason: str | None = None):
        super().__init__(
            type_uri=f"{PROBLEM_BASE_URI}/invalid-date-range",
            title="Invalid Date Range",
            status=400,
            detail=reason or f"Parameter 'start' ({start}) must not be after 'end' ({end})",
        )
