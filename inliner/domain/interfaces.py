from abc import ABC, abstractmethod

from inliner.domain.models import EditRequest, GenerationRequest, ImageResult


class ImageGenerator(ABC):
    @abstractmethod
    async def generate(self, request: GenerationRequest) -> ImageResult:
        """Returns the generated image once the server reports it ready"""
        pass

    @abstractmethod
    async def edit(self, request: EditRequest) -> ImageResult:
        """Returns an edited image derived from an existing or uploaded source"""
        pass
