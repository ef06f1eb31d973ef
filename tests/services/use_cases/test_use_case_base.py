"""
Tests for slidesync.services.use_cases.base
"""

import pytest

from slidesync.models import AlignmentRequest, AlignmentResponse
from slidesync.services.pipeline.alignment import AlignmentPipeline
from slidesync.services.use_cases.base import UseCase


class TestUseCase:
    """Test the UseCase abstract base class."""

    def test_cannot_instantiate_abstract(self):
        """Verify UseCase cannot be instantiated directly."""
        with pytest.raises(TypeError):
            UseCase()

    def test_pipeline_is_a_use_case(self):
        assert isinstance(AlignmentPipeline(), UseCase)

    @pytest.mark.asyncio
    async def test_execute_called(self):
        """Verify execute method is callable as expected."""
        class EchoUseCase(UseCase[AlignmentRequest, AlignmentResponse]):
            async def execute(self, request: AlignmentRequest) -> AlignmentResponse:
                return AlignmentResponse(run_id="echo", matches=[], sections=[], warnings=[request.script])

        result = await EchoUseCase().execute(AlignmentRequest(script="hello"))
        assert result.warnings == ["hello"]
