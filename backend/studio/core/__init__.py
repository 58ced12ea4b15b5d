"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Exception hierarchy shared by stores, providers and routes
    - runtime.py: Environment parsing and startup directory checks
    - media.py: Image payload decoding and content type sniffing

Usage:
    from studio.core import get_logger, JobNotFoundError
"""

from .logging import (
    setup_logging,
    get_logger,
    set_request_id,
    set_sweep_id,
    set_job_id,
    clear_context,
    LogTimer,
)

from .exceptions import (
    StudioError,
    InvalidCreationRequestError,
    StoreError,
    JobNotFoundError,
    DuplicateJobError,
    InvalidTransitionError,
    JobStateError,
    LeaseTimeoutError,
    AssetNotFoundError,
    InvalidAssetKeyError,
    ProviderError,
    ProviderConfigurationError,
    DispatchError,
    DownloadError,
)

from .runtime import (
    parse_bool_env,
    env_int,
    env_float,
    assert_directory_writable,
    run_startup_runtime_checks,
)

from .media import (
    decode_data_url,
    sniff_content_type,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_request_id",
    "set_sweep_id",
    "set_job_id",
    "clear_context",
    "LogTimer",
    # Exceptions
    "StudioError",
    "InvalidCreationRequestError",
    "StoreError",
    "JobNotFoundError",
    "DuplicateJobError",
    "InvalidTransitionError",
    "JobStateError",
    "LeaseTimeoutError",
    "AssetNotFoundError",
    "InvalidAssetKeyError",
    "ProviderError",
    "ProviderConfigurationError",
    "DispatchError",
    "DownloadError",
    # Runtime
    "parse_bool_env",
    "env_int",
    "env_float",
    "assert_directory_writable",
    "run_startup_runtime_checks",
    # Media
    "decode_data_url",
    "sniff_content_type",
]
