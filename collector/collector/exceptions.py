"""Exceptions for the collection subsystem"""


class CollectorError(Exception):
    """Base exception for the collection subsystem"""

    pass


class KeywordValidationError(CollectorError):
    """Submitted keywords were rejected before any job was created"""

    pass


class JobStoreError(CollectorError):
    """The job store could not be read or written"""

    def __init__(self, detail: str, cause: Exception | None = None):
        self.detail = detail
        self.cause = cause
        msg = f"Job store error: {detail}"
        if cause:
            msg += f" ({cause})"
        super().__init__(msg)


class PollingTimeout(CollectorError):
    """Job did not reach a terminal state within the polling limits"""

    def __init__(self, job_id: str, elapsed: float, polls: int):
        self.job_id = job_id
        self.elapsed = elapsed
        self.polls = polls
        super().__init__(
            f"Job {job_id} still running after {elapsed:.0f}s and {polls} poll(s)"
        )


class JobFailed(CollectorError):
    """Job ended in the failed state"""

    def __init__(self, job_id: str, error: str | None):
        self.job_id = job_id
        self.error = error
        super().__init__(f"Job {job_id} failed: {error or 'unknown error'}")
