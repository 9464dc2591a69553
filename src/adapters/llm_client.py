"""LLM client adapter for narrow query-understanding tasks.

Implements DateFallbackProtocol and IntentClassifierProtocol with OpenAI
chat completions. Both tasks expect a single-token answer; anything else is
treated as "no answer" rather than an error.
"""

import hashlib
import re
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Final

import yaml
from openai import APIError, APITimeoutError, OpenAI
from openai import RateLimitError as OpenAIRateLimitError

from src.config.logging_config import get_logger
from src.domain.exceptions import ExtractionTimeoutError, LLMAPIError
from src.domain.models import Intent

NONE_SENTINEL: Final[str] = "none"
"""Answer the date prompt gives when the query holds no explicit date."""

ISO_DATE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PREVIEW_LENGTH_RESPONSE: Final[int] = 40
"""Maximum characters of a rejected answer to include in logs."""

logger = get_logger(__name__)


@dataclass(frozen=True)
class PromptFileData:
    """Loaded prompt payload with metadata."""

    content: str
    version: str | None
    checksum: str
    size_bytes: int
    path: Path


@dataclass
class _PromptCacheEntry:
    """Cache entry storing metadata for a prompt file."""

    mtime: float
    data: PromptFileData


_PROMPT_CACHE: dict[Path, _PromptCacheEntry] = {}

DEFAULT_DATE_PROMPT_PATH: Final[Path] = Path("config/prompts/date_fallback.yaml")
DEFAULT_INTENT_PROMPT_PATH: Final[Path] = Path("config/prompts/intent.yaml")


def load_prompt_from_file(file_path: str) -> PromptFileData:
    """Load prompt template from a file with caching and metadata.

    Args:
        file_path: Path to the prompt file

    Returns:
        Prompt payload metadata

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML prompt file has invalid structure
    """

    raw_path = Path(file_path).expanduser()
    path = raw_path if raw_path.is_absolute() else (Path.cwd() / raw_path).resolve()

    if not path.exists():
        repo_root = Path(__file__).resolve().parents[2]
        alt_path = (repo_root / raw_path).resolve()
        if alt_path.exists():
            path = alt_path
        else:
            raise FileNotFoundError(f"Prompt file not found: {file_path}")

    stat_result = path.stat()
    cache_entry = _PROMPT_CACHE.get(path)
    if cache_entry and cache_entry.mtime == stat_result.st_mtime:
        return cache_entry.data

    if path.suffix.lower() in {".yaml", ".yml"}:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        if not isinstance(parsed, dict):
            raise ValueError(f"Prompt YAML must be a mapping: {path}")

        version = parsed.get("version")
        if not isinstance(version, str):
            raise ValueError(f"Prompt YAML missing 'version' string: {path}")

        system_prompt = parsed.get("system")
        if not isinstance(system_prompt, str):
            raise ValueError(f"Prompt YAML missing 'system' string: {path}")
    else:
        system_prompt = path.read_text(encoding="utf-8")
        version = None

    system_prompt = system_prompt.strip()
    encoded = system_prompt.encode("utf-8")
    prompt_data = PromptFileData(
        content=system_prompt,
        version=version,
        checksum=hashlib.sha256(encoded).hexdigest(),
        size_bytes=len(encoded),
        path=path,
    )

    _PROMPT_CACHE[path] = _PromptCacheEntry(
        mtime=stat_result.st_mtime, data=prompt_data
    )
    return prompt_data


class LLMClient:
    """OpenAI chat client for date fallback and intent classification."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 8.0,
        date_prompt_file: str | None = None,
        intent_prompt_file: str | None = None,
    ) -> None:
        """Initialize LLM client.

        Client-side retries are disabled: a slow answer is worth less than
        no answer inside an interactive SMS request.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            timeout: Per-request timeout in seconds
            date_prompt_file: Path to the date fallback prompt
            intent_prompt_file: Path to the intent classification prompt
        """
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.model = model
        self.timeout = timeout

        self._date_prompt = load_prompt_from_file(
            date_prompt_file or str(DEFAULT_DATE_PROMPT_PATH)
        )
        self._intent_prompt = load_prompt_from_file(
            intent_prompt_file or str(DEFAULT_INTENT_PROMPT_PATH)
        )

        logger.info(
            "llm_prompts_ready",
            model=self.model,
            date_prompt_version=self._date_prompt.version,
            date_prompt_hash=self._date_prompt.checksum[:12],
            intent_prompt_version=self._intent_prompt.version,
            intent_prompt_hash=self._intent_prompt.checksum[:12],
        )

    def extract_date(self, text: str, reference_date: date) -> date | None:
        """Extract an explicit calendar date from a query.

        Args:
            text: Raw query text
            reference_date: Today's date on campus

        Returns:
            Parsed date, or None for the 'none' sentinel or malformed output

        Raises:
            ExtractionTimeoutError: When the request exceeds the client timeout
            LLMAPIError: On API communication errors
        """
        user_prompt = f"Today is {reference_date.isoformat()}.\nQuery: {text}"
        answer = self._complete(
            "date_fallback", self._date_prompt.content, user_prompt, temperature=0.0
        )

        if answer.lower() == NONE_SENTINEL:
            return None

        if ISO_DATE_PATTERN.match(answer):
            try:
                return date.fromisoformat(answer)
            except ValueError:
                pass

        logger.warning(
            "llm_date_answer_rejected",
            answer_preview=answer[:PREVIEW_LENGTH_RESPONSE],
        )
        return None

    def classify_intent(self, message: str) -> Intent:
        """Classify an inbound message.

        Args:
            message: Raw inbound text

        Returns:
            Intent; unrecognized answers fall back to SEARCH

        Raises:
            ExtractionTimeoutError: When the request exceeds the client timeout
            LLMAPIError: On API communication errors
        """
        answer = self._complete(
            "intent", self._intent_prompt.content, message, temperature=0.3
        )
        cleaned = answer.strip(" \"'.").lower()

        try:
            return Intent(cleaned)
        except ValueError:
            logger.warning(
                "llm_intent_answer_rejected",
                answer_preview=answer[:PREVIEW_LENGTH_RESPONSE],
            )
            return Intent.SEARCH

    def _complete(
        self, task: str, system_prompt: str, user_prompt: str, temperature: float
    ) -> str:
        start_time = time.time()
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
            )
        except APITimeoutError as exc:
            logger.warning("llm_timeout", task=task, timeout_seconds=self.timeout)
            raise ExtractionTimeoutError(self.timeout) from exc
        except OpenAIRateLimitError as exc:
            logger.warning("llm_rate_limited", task=task, error=str(exc))
            raise LLMAPIError(f"Rate limit exceeded: {exc}") from exc
        except APIError as exc:
            logger.error("llm_api_error", task=task, error=str(exc))
            raise LLMAPIError(f"OpenAI API error: {exc}") from exc

        latency_ms = int((time.time() - start_time) * 1000)

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError):
            content = None

        usage = getattr(response, "usage", None)
        logger.info(
            "llm_call_completed",
            task=task,
            model=self.model,
            latency_ms=latency_ms,
            tokens_in=getattr(usage, "prompt_tokens", 0) if usage else 0,
            tokens_out=getattr(usage, "completion_tokens", 0) if usage else 0,
        )
        return (content or "").strip()
