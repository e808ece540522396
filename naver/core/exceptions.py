"""Custom exceptions for the Naver API layer"""

from typing import Any


class NaverAPIError(Exception):
    """Base exception for the Naver API layer"""

    pass


class NoCredentialsConfigured(NaverAPIError):
    """Credential list is empty"""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"No {kind} credentials configured")


class APIError(NaverAPIError):
    """Transient API call error (non-2xx, network failure or malformed body)"""

    def __init__(self, status_code: int, detail: str, response: Any = None):
        self.status_code = status_code
        self.detail = detail
        self.response = response
        super().__init__(f"API error {status_code}: {detail}")


class CredentialError(NaverAPIError):
    """The credential set itself cannot be used right now"""

    def __init__(self, key_name: str, message: str):
        self.key_name = key_name
        super().__init__(message)


class CredentialRejected(CredentialError):
    """Credential refused by the API (401/403)"""

    def __init__(self, key_name: str, status_code: int):
        self.status_code = status_code
        super().__init__(
            key_name, f"Credential rejected: {key_name} (status: {status_code})"
        )


class RateLimited(CredentialError):
    """Credential is rate limited (429)"""

    def __init__(self, key_name: str, retry_after: float | None = None):
        self.retry_after = retry_after
        msg = f"Rate limited for credential: {key_name}"
        if retry_after:
            msg += f" (retry after: {retry_after}s)"
        super().__init__(key_name, msg)


class AllKeysFailed(NaverAPIError):
    """Every configured credential was tried and failed"""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        msg = f"All {attempts} credential attempts failed"
        if last_error:
            msg += f". Last error: {last_error}"
        super().__init__(msg)
