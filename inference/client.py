"""
Chat-completion client used by the poll loop.

One user message per NFT item, fixed model and token budget, no streaming and
no retries. Works with any OpenAI-compatible endpoint (OPENAI_BASE_URL).

  query  = build_query(prompt, description)
  answer = CompletionClient.from_config(config).complete(query)
"""

from __future__ import annotations

from typing import Optional

from openai import OpenAI, OpenAIError

from agent.config import BotConfig
from agent.deadline import call_with_deadline
from agent.errors import CompletionFailed, OperationTimeout

QUERY_SEPARATOR = "\n---\n"
QUERY_SUFFIX = "\nAnswer very concisely."


def build_query(prompt: str, description: str) -> str:
    """Prompt template, separator, item description, brevity instruction, in that order."""
    return prompt + QUERY_SEPARATOR + description + QUERY_SUFFIX


class CompletionClient:
    def __init__(
        self,
        client: OpenAI,
        *,
        model: str = "gpt-4o",
        max_tokens: int = 150,
        timeout_s: float = 15.0,
    ) -> None:
        self._client = client
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: BotConfig) -> "CompletionClient":
        client = OpenAI(
            base_url=config.openai_base_url,
            api_key=config.openai_api_key,
            timeout=config.completion_timeout_s,
            max_retries=0,
        )
        return cls(
            client,
            model=config.openai_model,
            max_tokens=config.max_tokens,
            timeout_s=config.completion_timeout_s,
        )

    def _create(self, content: str) -> Optional[str]:
        response = self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            max_tokens=self.max_tokens,
        )
        if not response.choices or response.choices[0].message is None:
            return None
        return response.choices[0].message.content

    def complete(self, content: str) -> str:
        """Return the generated answer for `content`; raise CompletionFailed otherwise."""
        try:
            raw = call_with_deadline(lambda: self._create(content), self.timeout_s, name="completion")
        except OperationTimeout as exc:
            raise CompletionFailed("completion", f"timed out after {self.timeout_s:g}s") from exc
        except OpenAIError as exc:
            raise CompletionFailed("completion", f"{type(exc).__name__}: {exc}") from exc
        except Exception as exc:
            raise CompletionFailed("completion", f"malformed response: {type(exc).__name__}: {exc}") from exc

        answer = (raw or "").strip()
        if not answer:
            raise CompletionFailed("completion", f"{self.model} returned an empty answer")
        return answer
