"""
Translation providers for AI-assisted translation of missing cells.
"""
import asyncio
import json
import logging
import random
import re
import uuid
from typing import Dict, List, Optional, Tuple

import jsonschema
import tiktoken
from aiolimiter import AsyncLimiter
from openai import (
    APIConnectionError,
    APIStatusError,
    RateLimitError,
    APITimeoutError,
    OpenAIError
)
from openai.types.chat import (
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam
)

logger = logging.getLogger("i18n_sheet.translator")

FALLBACK_ENCODING = "gpt2"

# The model must answer with {"translations": ["...", ...]}.
TRANSLATIONS_SCHEMA = {
    "type": "object",
    "properties": {
        "translations": {
            "type": "array",
            "items": {"type": "string"}
        }
    },
    "required": ["translations"]
}

# Interpolation placeholders ({name}, {{ name }}) and HTML-like tags.
PROTECTED_PATTERN = re.compile(r'(<[^<>]+>)|(\{\{?[^{}]+\}\}?)')

SYSTEM_PROMPT = """
You are a professional translator for software internationalization (i18n).
Translate each of the input texts from "{source_lang}" to "{target_lang}".

**Instructions**:
- **Do not translate or modify placeholder tokens**: Any text enclosed within double underscores `__` (e.g., `__PH_abc123__`) must remain exactly as is.
- **Preserve formatting**: Keep line breaks, punctuation style and special characters.
- **Keep the order**: Return exactly one translation per input text, in the same order.
- Return a JSON object with a key "translations" containing an array of strings.
"""


class TranslationError(Exception):
    """Raised when a batch cannot be translated."""


def protect_placeholders(text: str) -> Tuple[str, Dict[str, str]]:
    """
    Replace placeholders and HTML tags with unique tokens.

    Args:
        text (str): The text to process.

    Returns:
        Tuple[str, Dict[str, str]]: The processed text and the token mapping.
    """
    if not isinstance(text, str):
        raise ValueError("Input text must be a string.")

    placeholder_mapping = {}

    def replace_placeholder(match):
        placeholder_token = f"__PH_{uuid.uuid4().hex}__"
        placeholder_mapping[placeholder_token] = match.group(0)
        return placeholder_token

    return PROTECTED_PATTERN.sub(replace_placeholder, text), placeholder_mapping


def restore_placeholders(text: str, placeholder_mapping: Dict[str, str]) -> str:
    for token, placeholder in placeholder_mapping.items():
        text = text.replace(token, placeholder)
    return text


def _encoding_for(model_name: str):
    try:
        return tiktoken.encoding_for_model(model_name)
    except KeyError:
        logger.debug("No tiktoken encoding registered for '%s'; using %s.", model_name, FALLBACK_ENCODING)
    except OSError as e:
        logger.debug("Could not load the tiktoken encoding for '%s': %s", model_name, e)
    try:
        return tiktoken.get_encoding(FALLBACK_ENCODING)
    except (OSError, ValueError) as e:
        logger.debug("Could not load the %s encoding: %s", FALLBACK_ENCODING, e)
        return None


def count_tokens(text: str, model_name: str = 'gpt-4o-mini') -> int:
    """Count the tokens in ``text`` for ``model_name``, or its words when no encoding can be loaded."""
    encoding = _encoding_for(model_name)
    if encoding is None:
        return len(text.split())
    return len(encoding.encode(text, disallowed_special=()))


def chunk_texts_by_tokens(texts: List[str], max_tokens: int, model_name: str = 'gpt-4o-mini') -> List[List[str]]:
    """
    Split ``texts`` into consecutive chunks whose token counts stay under ``max_tokens``.

    A single text larger than the budget gets a chunk of its own.
    """
    chunks: List[List[str]] = []
    current: List[str] = []
    current_tokens = 0
    for text in texts:
        tokens = count_tokens(text, model_name)
        if current and current_tokens + tokens > max_tokens:
            chunks.append(current)
            current, current_tokens = [], 0
        current.append(text)
        current_tokens += tokens
    if current:
        chunks.append(current)
    return chunks


class TranslationProvider:
    """Interface for services that translate batches of strings."""

    async def translate_batch(self, texts: List[str], source_lang: str, target_lang: str) -> List[str]:
        raise NotImplementedError


class OpenAIProvider(TranslationProvider):
    """Translates batches through the OpenAI chat completions API."""

    def __init__(self, client, model_name: str, max_concurrent: int = 2,
                 requests_per_minute: int = 60, max_batch_tokens: int = 2000,
                 max_retries: int = 5, base_delay: float = 1.0):
        self.client = client
        self.model_name = model_name
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self.rate_limiter = AsyncLimiter(requests_per_minute, 60)
        self.max_batch_tokens = max_batch_tokens
        self.max_retries = max_retries
        self.base_delay = base_delay

    async def translate_batch(self, texts: List[str], source_lang: str, target_lang: str) -> List[str]:
        """
        Translate ``texts`` from ``source_lang`` to ``target_lang``.

        Large batches are split by token count and translated concurrently.

        Returns:
            List[str]: Translations in input order.
        """
        if not texts:
            return []
        chunks = chunk_texts_by_tokens(texts, self.max_batch_tokens, self.model_name)
        results = await asyncio.gather(
            *(self._translate_chunk(chunk, source_lang, target_lang) for chunk in chunks)
        )
        return [text for chunk_result in results for text in chunk_result]

    async def _request_translations(self, system_prompt: str, payload: str) -> List[str]:
        """Make one API call and return the validated ``translations`` list."""
        async with self.semaphore, self.rate_limiter:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    ChatCompletionSystemMessageParam(role="system", content=system_prompt),
                    ChatCompletionUserMessageParam(role="user", content=f"Input Texts:\n{payload}")
                ],
                temperature=0.2,
                response_format={"type": "json_object"},
                timeout=120.0,
            )
        parsed = json.loads(response.choices[0].message.content.strip())
        jsonschema.validate(instance=parsed, schema=TRANSLATIONS_SCHEMA)
        return parsed["translations"]

    async def _translate_chunk(self, texts: List[str], source_lang: str, target_lang: str) -> List[str]:
        protected = [protect_placeholders(text) for text in texts]
        payload = json.dumps([processed for processed, _ in protected], ensure_ascii=False)
        system_prompt = SYSTEM_PROMPT.format(source_lang=source_lang, target_lang=target_lang)

        # Each attempt takes its own concurrency slot and rate-limit token; backoff holds neither.
        for attempt in range(1, self.max_retries + 1):
            api_exc: Optional[Exception] = None
            try:
                translations = await self._request_translations(system_prompt, payload)
            except json.JSONDecodeError as json_exc:
                logger.error(f"Translation failed: model did not return valid JSON. Error: {json_exc}")
            except jsonschema.ValidationError as schema_exc:
                logger.error(f"Translation failed: response did not match the schema. Error: {schema_exc.message}")
            except (RateLimitError, APITimeoutError, APIConnectionError, APIStatusError, OpenAIError) as exc:
                logger.error(f"API error occurred: {exc.__class__.__name__} - {exc}")
                api_exc = exc
            else:
                if len(translations) != len(texts):
                    logger.warning(
                        "Sent %d texts, got %d back for '%s'. Manual verification suggested.",
                        len(texts), len(translations), target_lang
                    )
                return [
                    restore_placeholders(translated, mapping)
                    for translated, (_, mapping) in zip(translations, protected)
                ]

            if not await _handle_retry(attempt, self.max_retries, self.base_delay, target_lang, api_exc):
                break

        raise TranslationError(f"Translation to '{target_lang}' failed after {self.max_retries} attempts.")


async def _handle_retry(attempt: int, max_retries: int, base_delay: float, target_lang: str,
                        api_exc: Optional[Exception] = None) -> bool:
    """
    Sleep before the next attempt using Retry-After or exponential backoff with jitter.

    Returns:
        bool: True if the caller should retry, False once attempts are exhausted.
    """
    if attempt >= max_retries:
        logger.error(f"Translation to '{target_lang}' failed after {max_retries} attempts.")
        return False

    delay = None
    headers = getattr(getattr(api_exc, "response", None), "headers", None) or {}
    retry_after_header = headers.get("Retry-After") if hasattr(headers, "get") else None
    if retry_after_header:
        if retry_after_header.isdigit():
            delay = float(retry_after_header)
        elif retry_after_header.endswith("ms") and retry_after_header[:-2].isdigit():
            delay = float(retry_after_header[:-2]) / 1000
    if delay is None:
        delay = base_delay * (2 ** (attempt - 1)) + random.uniform(0, 1)

    logger.info(f"Retrying translation to '{target_lang}' in {delay:.2f} seconds (Attempt {attempt}/{max_retries})")
    await asyncio.sleep(delay)
    return True
