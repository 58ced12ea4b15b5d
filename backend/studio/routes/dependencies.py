"""
Route dependencies - resolve shared services from the application state.
"""

from fastapi import Request

from ..services.infrastructure.orchestration import ServiceContainer
from ..services.use_cases import CreationQueries, SubmitCreationUseCase


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_submit_use_case(request: Request) -> SubmitCreationUseCase:
    container = get_container(request)
    return SubmitCreationUseCase(
        container.job_store,
        container.asset_store,
        container.provider_settings,
    )


def get_creation_queries(request: Request) -> CreationQueries:
    container = get_container(request)
    return CreationQueries(container.job_store, container.asset_store)
