"""
Base use case class.

Each use case encapsulates a single business operation and knows nothing
about HTTP. Routes translate requests into use case calls and translate the
domain exceptions raised here into HTTP responses.

Example:
    >>> class SubmitCreationUseCase(UseCase[CreationRequest, CreationResponse]):
    ...     async def execute(self, request: CreationRequest) -> CreationResponse:
    ...         ...
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class UseCase(ABC, Generic[RequestT, ResponseT]):
    """
    Base use case abstract class.

    Type Parameters:
        RequestT: Type of the input request object
        ResponseT: Type of the output response object
    """

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        """
        Execute the use case and return a response.

        Raises:
            Domain exceptions from studio.core.exceptions. HTTP exceptions
            are the route's responsibility.
        """
        pass
