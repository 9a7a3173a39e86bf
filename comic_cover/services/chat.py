"""
Chat Service - OpenAI chat completion client

Used for two small creative tasks: naming the hero and writing panel
dialogue. Both go through `chat_completion`, which returns the text plus
usage metadata.

Usage:
    from comic_cover.services.chat import ChatService

    chat = ChatService(api_key="sk-...")
    response = await chat.chat_completion(
        messages=[{"role": "user", "content": "Hello!"}],
        model="gpt-4o",
        temperature=0.7,
    )
    print(response["content"])
"""

import logging
import time
from typing import Optional, List, Dict, Any

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)


class ChatService:
    """Async wrapper around the OpenAI chat completions API."""

    def __init__(self, api_key: Optional[str] = None, client: Optional[AsyncOpenAI] = None, cc_logger=None):
        """
        Initialize the chat client.

        Args:
            api_key: OpenAI API key (None falls back to OPENAI_API_KEY)
            client: Pre-built AsyncOpenAI client (tests inject a fake)
            cc_logger: Optional ComicCoverLogger for API call logs
        """
        self.api_key = api_key
        self.cc_logger = cc_logger
        self._client: Optional[AsyncOpenAI] = client

    @property
    def async_client(self) -> AsyncOpenAI:
        """Client is created on first use, so a missing key only fails the call."""
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def chat_completion(
        self,
        messages: List[Dict[str, str]],
        model: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        purpose: str = "",
    ) -> Dict[str, Any]:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with "role" and "content"
            model: Model name
            temperature: Sampling temperature
            max_tokens: Optional completion token cap
            purpose: Short label for logs ("hero-name", "dialogue")

        Returns:
            Dict with "content" (possibly empty), "model" and "usage"
        """
        api_params = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            api_params["max_tokens"] = max_tokens

        user_msg = next((m['content'] for m in messages if m.get('role') == 'user'), None)
        logger.info(f"🔷 Chat Request: model={model}, temp={temperature}, max_tokens={max_tokens}")
        if user_msg:
            logger.debug(f"   💬 Context: {user_msg[:150].replace(chr(10), ' ')}...")

        start = time.time()
        try:
            response = await self.async_client.chat.completions.create(**api_params)
        except Exception as e:
            logger.error(f"Chat completion failed ({model}): {e}")
            if self.cc_logger:
                self.cc_logger.llm_api_call(model, latency=time.time() - start, status="error", purpose=purpose)
            raise

        content = ""
        if response.choices:
            content = response.choices[0].message.content or ""

        usage = getattr(response, "usage", None)
        prompt_tokens = getattr(usage, "prompt_tokens", 0) or 0
        completion_tokens = getattr(usage, "completion_tokens", 0) or 0

        if self.cc_logger:
            self.cc_logger.llm_api_call(
                model,
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                latency=time.time() - start,
                purpose=purpose,
            )

        return {
            "content": content,
            "model": getattr(response, "model", model),
            "usage": {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        }
