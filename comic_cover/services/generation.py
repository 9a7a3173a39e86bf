"""
Generation Service - submit-then-poll orchestration for image predictions

Submits a prediction to the inference service and polls its status until
it reaches a terminal state or the attempt budget runs out.

Poll loop:
    submit -> starting
    while status in (starting, processing) and attempts < max_attempts:
        sleep(interval); get(); attempts += 1
    succeeded + output -> Succeeded(url)
    failed / canceled / succeeded without output -> Failed(status)
    budget exhausted -> TimedOut(status, attempts)

The wait is a cooperative `asyncio.sleep`, so one slow job never blocks
other requests served by the same event loop.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from comic_cover.config.limits import (
    POLL_INTERVAL_SECONDS,
    MAX_POLL_ATTEMPTS,
    PROMPT_MAX_LENGTH,
)
from comic_cover.models.models import (
    GenerationJob,
    GenerationResult,
    JobStatus,
    Succeeded,
    Failed,
    TimedOut,
)
from comic_cover.services.errors import GenerationError, InputValidationError
from comic_cover.services.replicate_client import ReplicateService, PredictionSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PollPolicy:
    """How often and how many times a prediction is checked."""
    interval_seconds: float = POLL_INTERVAL_SECONDS
    max_attempts: int = MAX_POLL_ATTEMPTS


@dataclass(frozen=True)
class GenerationParams:
    """Fixed parameters sent with every prediction."""
    aspect_ratio: str = "match_input_image"
    output_format: str = "jpg"
    guidance_scale: float = 3.5
    num_inference_steps: int = 28
    safety_tolerance: int = 2
    prompt_upsampling: bool = True

    @classmethod
    def from_settings(cls, settings) -> "GenerationParams":
        return cls(
            aspect_ratio=settings.generation_aspect_ratio,
            output_format=settings.generation_output_format,
            guidance_scale=settings.generation_guidance_scale,
            num_inference_steps=settings.generation_num_inference_steps,
            safety_tolerance=settings.generation_safety_tolerance,
            prompt_upsampling=settings.generation_prompt_upsampling,
        )


def extract_output_url(output: Any) -> Optional[str]:
    """Predictions return either a URL string or a list of URLs."""
    if isinstance(output, (list, tuple)):
        output = output[0] if output else None
    if isinstance(output, str) and output.strip():
        return output.strip()
    return None


class GenerationService:
    """
    Orchestrates one image prediction per call.

    Each call owns its GenerationJob; nothing is shared between calls, so
    concurrent requests are independent.
    """

    def __init__(
        self,
        replicate_service: ReplicateService,
        policy: Optional[PollPolicy] = None,
        params: Optional[GenerationParams] = None,
        sleep=asyncio.sleep,
        cc_logger=None,
    ):
        """
        Args:
            replicate_service: Inference collaborator (submit/get)
            policy: Poll interval and attempt ceiling
            params: Fixed generation parameters
            sleep: Awaitable sleep used between polls (tests inject a no-op)
            cc_logger: Optional ComicCoverLogger for job-level events
        """
        self.replicate = replicate_service
        self.policy = policy or PollPolicy()
        self.params = params or GenerationParams()
        self._sleep = sleep
        self.cc_logger = cc_logger

    def build_input(self, prompt: str, input_image_url: str, seed: Optional[int] = None) -> Dict[str, Any]:
        """Assemble the prediction input for a prompt and reference image."""
        payload = {
            "prompt": prompt,
            "input_image": input_image_url,
            "aspect_ratio": self.params.aspect_ratio,
            "output_format": self.params.output_format,
            "guidance_scale": self.params.guidance_scale,
            "num_inference_steps": self.params.num_inference_steps,
            "safety_tolerance": self.params.safety_tolerance,
            "prompt_upsampling": self.params.prompt_upsampling,
        }
        if seed is not None:
            payload["seed"] = seed
        return payload

    def _observe(self, job: GenerationJob, snapshot: PredictionSnapshot) -> None:
        status = JobStatus.parse(snapshot.status)
        url = extract_output_url(snapshot.output)
        if status == JobStatus.SUCCEEDED and not url:
            logger.error(f"❌ Prediction {job.job_id} succeeded without output: {snapshot.output!r}")
            status = JobStatus.FAILED
        job.observe(status, url)

    async def run(self, prompt: str, selfie_url: str, seed: Optional[int] = None) -> GenerationResult:
        """
        Generate one image and report how the job ended.

        Args:
            prompt: Natural-language prompt passed verbatim to the model
            selfie_url: Public URL of the reference image
            seed: Optional seed for repeatable compositions

        Returns:
            Succeeded(url), Failed(status) or TimedOut(status, attempts)

        Raises:
            InputValidationError: prompt or selfie_url is empty
        """
        prompt = (prompt or "").strip()
        selfie_url = (selfie_url or "").strip()
        if not prompt or not selfie_url:
            raise InputValidationError("Missing prompt or selfieUrl")
        if len(prompt) > PROMPT_MAX_LENGTH:
            raise InputValidationError(f"Prompt exceeds {PROMPT_MAX_LENGTH} characters")

        job = GenerationJob(prompt=prompt, input_image_url=selfie_url)
        start_time = time.time()

        logger.info(f"🧠 Generating image ({len(prompt)} chars prompt)")
        logger.debug(f"📝 Prompt: {prompt}")
        logger.debug(f"📸 Reference image: {selfie_url}")

        snapshot = await self.replicate.submit(self.build_input(prompt, selfie_url, seed))
        if not snapshot.id:
            logger.error("❌ Failed to start prediction: no id returned")
            return Failed(status=JobStatus.FAILED.value)

        job.job_id = snapshot.id
        self._observe(job, snapshot)
        if self.cc_logger:
            self.cc_logger.job_submitted(job.job_id, getattr(self.replicate, "model", ""))

        while not job.status.is_terminal and job.attempts < self.policy.max_attempts:
            await self._sleep(self.policy.interval_seconds)
            snapshot = await self.replicate.get(job.job_id)
            job.attempts += 1
            self._observe(job, snapshot)
            logger.debug(f"⏳ Polling attempt {job.attempts}, status: {job.status.value}")
            if self.cc_logger:
                self.cc_logger.generation_poll(job.job_id, job.attempts, job.status.value, snapshot.output)

        if job.status == JobStatus.SUCCEEDED:
            duration = time.time() - start_time
            logger.info(f"✅ Prediction {job.job_id} succeeded after {job.attempts} poll(s): {job.output_url}")
            if self.cc_logger:
                self.cc_logger.job_succeeded(job.job_id, job.attempts, duration)
            return Succeeded(url=job.output_url)

        if self.cc_logger:
            self.cc_logger.job_failed(job.job_id, job.status.value, job.attempts)

        if job.status.is_terminal:
            logger.error(f"❌ Prediction {job.job_id} ended as {job.status.value} (error: {snapshot.error})")
            return Failed(status=job.status.value)

        logger.error(f"❌ Prediction {job.job_id} still {job.status.value} after {job.attempts} poll(s)")
        return TimedOut(status=job.status.value, attempts=job.attempts)

    async def generate(self, prompt: str, selfie_url: str, seed: Optional[int] = None) -> str:
        """
        Generate one image and return its URL.

        Raises:
            InputValidationError: prompt or selfie_url is empty
            GenerationError: the job failed, was canceled or timed out
        """
        result = await self.run(prompt, selfie_url, seed=seed)
        if isinstance(result, Succeeded):
            return result.url
        if isinstance(result, TimedOut):
            raise GenerationError(
                result.status,
                f"Image generation timed out after {result.attempts} status checks (status: {result.status})",
                attempts=result.attempts,
            )
        raise GenerationError(result.status)
