"""
Base use case class.

Each use case encapsulates a single operation and is independent of any
transport or UI surface, so the same object can be driven from a CLI, a
web handler or a test.

Example:
    >>> class AlignScriptUseCase(UseCase[AlignmentRequest, AlignmentResponse]):
    ...     async def execute(self, request: AlignmentRequest) -> AlignmentResponse:
    ...         ...

    >>> response = await AlignScriptUseCase().execute(request)
"""

from abc import ABC, abstractmethod
from typing import TypeVar, Generic

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

        Args:
            request: Request object containing all required input data

        Returns:
            Response object containing operation results

        Raises:
            InputValidationError subclasses for bad input. Everything else
            should be turned into a result the caller can act on.
        """
        pass
