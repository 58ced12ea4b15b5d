"""
Core Exceptions
Standardized exceptions for the creation service.
"""


class StudioError(Exception):
    """Base exception for all application errors."""
    pass


class InvalidCreationRequestError(StudioError):
    """A creation request that cannot be turned into a job (bad image payload, empty parts)."""
    pass


class StoreError(StudioError):
    """Base exception for job and asset storage errors."""
    pass


class JobNotFoundError(StoreError):
    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class DuplicateJobError(StoreError):
    def __init__(self, job_id: str):
        super().__init__(f"Job already exists: {job_id}")
        self.job_id = job_id


class InvalidTransitionError(StoreError):
    """A status write that would move a job backwards or skip a state."""

    def __init__(self, job_id: str, current: str, requested: str):
        super().__init__(f"Job {job_id} cannot move from '{current}' to '{requested}'")
        self.job_id = job_id
        self.current = current
        self.requested = requested


class JobStateError(StoreError):
    """A write that would leave a job record violating its invariants."""
    pass


class LeaseTimeoutError(StoreError):
    def __init__(self, job_id: str, waited: float):
        super().__init__(f"Timed out after {waited:.1f}s waiting for lease on job {job_id}")
        self.job_id = job_id


class AssetNotFoundError(StoreError):
    def __init__(self, key: str):
        super().__init__(f"Asset not found: {key}")
        self.key = key


class InvalidAssetKeyError(StoreError):
    def __init__(self, key: str):
        super().__init__(f"Invalid asset key: {key!r}")
        self.key = key


class ProviderError(StudioError):
    """Base exception for generation provider errors."""
    pass


class ProviderConfigurationError(ProviderError):
    pass


class DispatchError(ProviderError):
    """The provider rejected task creation. Fatal for the job, never retried."""
    pass


class DownloadError(ProviderError):
    """Fetching finished media failed or produced an unusable payload."""
    pass
