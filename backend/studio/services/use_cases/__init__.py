"""
Use Cases package - Business logic layer.

Modules:
- base: Base use case abstract class
- creation_use_case: Submitting creation jobs and reading them back
"""

from .base import UseCase
from .creation_use_case import (
    SubmitCreationUseCase,
    CreationQueries,
    job_to_response,
    asset_url,
)

__all__ = [
    "UseCase",
    "SubmitCreationUseCase",
    "CreationQueries",
    "job_to_response",
    "asset_url",
]
