# dish_carbon/integrations/openai_chat.py - chat/completions over the OpenAI SDK
from __future__ import annotations
import base64
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import openai
from openai import AsyncOpenAI

from ..errors import ProviderConnectionError, ProviderHTTPError, ProviderTimeoutError

Content = Union[str, List[Dict[str, Any]]]


@dataclass(frozen=True)
class ProviderRequest:
    model: str
    content: Content
    max_tokens: int
    temperature: float = 0

    @property
    def messages(self) -> List[Dict[str, Any]]:
        return [{"role": "user", "content": self.content}]


@dataclass(frozen=True)
class ProviderResponse:
    status_code: int
    text: str


def image_data_url(data: bytes, mime: str) -> str:
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{b64}"


def vision_content(instruction: str, data_url: str) -> List[Dict[str, Any]]:
    return [
        {"type": "text", "text": instruction},
        {"type": "image_url", "image_url": {"url": data_url}},
    ]


class OpenAIChatProvider:
    """
    POSTs {base_url}/chat/completions and hands back the raw reply body.
    The SDK's own retries are off; RetryPolicy decides what gets retried.
    """

    def __init__(self, api_key: str, base_url: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    async def complete(self, request: ProviderRequest, timeout: Optional[float] = None) -> ProviderResponse:
        try:
            raw = await self._client.chat.completions.with_raw_response.create(
                model=request.model,
                messages=request.messages,
                max_tokens=request.max_tokens,
                temperature=request.temperature,
                timeout=timeout,
            )
        except openai.APITimeoutError as e:
            raise ProviderTimeoutError(str(e)) from e
        except openai.APIStatusError as e:
            raise ProviderHTTPError(e.status_code, e.response.text) from e
        except openai.APIConnectionError as e:
            raise ProviderConnectionError(str(e)) from e
        return ProviderResponse(status_code=raw.status_code, text=raw.text)

    async def close(self) -> None:
        await self._client.close()
