"""
Replicate Service - image generation inference client

Thin async wrapper around the `replicate` SDK. Only two calls are needed:
submit a prediction and fetch its current state. Polling policy lives in
GenerationService, not here.

Usage:
    from comic_cover.services.replicate_client import ReplicateService

    replicate_service = ReplicateService(api_token="r8_...")
    snapshot = await replicate_service.submit({"prompt": "...", "input_image": url})
    snapshot = await replicate_service.get(snapshot.id)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import replicate

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "black-forest-labs/flux-kontext-pro"


@dataclass
class PredictionSnapshot:
    """State of a prediction as last reported by the inference service."""
    id: Optional[str]
    status: str
    output: Any = None
    error: Optional[str] = None

    @classmethod
    def from_prediction(cls, prediction) -> "PredictionSnapshot":
        return cls(
            id=getattr(prediction, "id", None),
            status=getattr(prediction, "status", None) or "failed",
            output=getattr(prediction, "output", None),
            error=getattr(prediction, "error", None),
        )


class ReplicateService:
    """
    Async client for the Replicate predictions API.

    Attributes:
        model: Model identifier in "owner/name" form
    """

    def __init__(self, api_token: Optional[str] = None, model: str = DEFAULT_MODEL, client=None):
        """
        Initialize the Replicate client.

        Args:
            api_token: Replicate API token (None falls back to REPLICATE_API_TOKEN)
            model: Model identifier
            client: Pre-built replicate.Client (tests inject a fake)
        """
        self.model = model
        self.client = client or replicate.Client(api_token=api_token)
        logger.info(f"Replicate client initialized: model={model}")

    async def submit(self, input: Dict[str, Any]) -> PredictionSnapshot:
        """Create a prediction and return its initial state."""
        prediction = await self.client.predictions.async_create(model=self.model, input=input)
        return PredictionSnapshot.from_prediction(prediction)

    async def get(self, job_id: str) -> PredictionSnapshot:
        """Fetch the current state of a prediction."""
        prediction = await self.client.predictions.async_get(job_id)
        return PredictionSnapshot.from_prediction(prediction)
