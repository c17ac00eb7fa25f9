"""
Remote model extractor for loan agreement terms.

Uses the Claude API as an alternative extraction strategy to the local
pattern engine. The model's JSON reply is sanitized and validated field by
field with the same rules applied to the pattern engine's output, so both
strategies return the same ExtractionResult shape.
"""

import json
import os
import re
import time
from typing import Any, Optional

import structlog

from .config import LMABridgeConfig
from .exceptions import AgentError, ConfigurationError
from .models import FIELD_ALIASES, LOAN_FIELDS, NO_ESG_TARGET, ExtractionResult, LoanRecord
from .preprocessor import preprocess
from .scoring import score
from .validation import sanitize_loan_data, validate_field

logger = structlog.get_logger()

AGENT_NAME = "llm_loan_extractor"

# Field descriptions sent to the model, keyed by the camelCase wire name
EXTRACTION_SCHEMA: dict[str, str] = {
    "borrowerName": "Legal name of the borrowing entity",
    "facilityAmount": "Total facility/principal amount as a plain number (no symbols or commas)",
    "currency": "ISO 4217 currency code of the facility (e.g. USD, EUR, GBP)",
    "interestRateMargin": "Margin over the reference rate as a percentage number (e.g. 2.75)",
    "leverageCovenant": "Maximum leverage ratio as a number (e.g. 4.25 for 4.25:1.00)",
    "esgTarget": "Sustainability/ESG target or commitment, quoted briefly",
}

_CAMEL_TO_FIELD = {alias: name for name, alias in FIELD_ALIASES.items()}


def parse_json_response(response: str) -> Optional[dict[str, Any]]:
    """Parse JSON from a model response, handling common formatting issues."""

    # Try direct parsing first
    try:
        parsed = json.loads(response.strip())
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    # Look for JSON in code blocks
    json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", response, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(1))
        except json.JSONDecodeError:
            pass

    # Look for standalone JSON object
    json_match = re.search(r"\{[^{}]*\}", response, re.DOTALL)
    if json_match:
        try:
            return json.loads(json_match.group(0))
        except json.JSONDecodeError:
            pass

    return None


def build_extraction_prompt(document_text: str) -> str:
    """Build the extraction prompt for the model."""
    field_descriptions = "\n".join(
        f"- {field}: {description}"
        for field, description in EXTRACTION_SCHEMA.items()
    )

    return f"""You are a syndicated loan documentation analyst. Extract the key commercial terms from the following loan agreement.

LOAN AGREEMENT TEXT:
---
{document_text}
---

FIELDS TO EXTRACT:
{field_descriptions}

INSTRUCTIONS:
1. Extract ONLY the requested fields from the agreement
2. For amounts, return just the number (no currency symbols or commas)
3. For the interest margin, return the percentage as a number (275 bps -> 2.75)
4. If a field cannot be found, set it to null
5. Do not invent values that are not stated in the agreement

Return ONLY a JSON object with the extracted fields. No explanation or additional text.

Example format:
{{"borrowerName": "Acme Holdings Inc.", "facilityAmount": 250000000, "currency": "USD", "interestRateMargin": 2.5, "leverageCovenant": 4.0, "esgTarget": null}}

JSON:"""


class LLMLoanExtractor:
    """
    Extract loan terms with the Claude API.

    Transient API failures are retried; once retries are exhausted an
    AgentError (recoverable) is raised so the caller can fall back to the
    local pattern engine.
    """

    method = "llm"

    def __init__(self, config: Optional[LMABridgeConfig] = None, client: Any = None):
        """
        Initialize the remote extractor.

        Args:
            config: Application configuration. Loaded from the environment if omitted.
            client: Pre-built Anthropic client (or compatible object).

        Raises:
            ConfigurationError: If the anthropic package or an API key is missing.
        """
        self.config = config or LMABridgeConfig()

        if client is None:
            client = self._create_client()
        self.client = client

    def _create_client(self) -> Any:
        try:
            import anthropic
        except ImportError:
            raise ConfigurationError(
                "The 'anthropic' package is required for remote extraction. "
                "Install it with: pip install anthropic",
                config_key="anthropic",
                expected="installed package",
            )

        api_key = self.config.llm.api_key or os.getenv("ANTHROPIC_API_KEY")
        if not api_key:
            raise ConfigurationError(
                "No Anthropic API key provided. Set LMA_BRIDGE_LLM_API_KEY or "
                "ANTHROPIC_API_KEY.",
                config_key="LMA_BRIDGE_LLM_API_KEY",
                expected="non-empty API key",
            )

        return anthropic.Anthropic(api_key=api_key, timeout=self.config.llm.timeout)

    def _request(self, prompt: str) -> str:
        """Call the Messages API, retrying transient failures."""
        llm = self.config.llm
        attempts = self.config.extraction.max_retries + 1
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                response = self.client.messages.create(
                    model=llm.model,
                    max_tokens=llm.max_tokens,
                    temperature=llm.temperature,
                    messages=[{"role": "user", "content": prompt}],
                )
                return response.content[0].text
            except Exception as e:
                last_error = e
                logger.warning(
                    "llm_request_failed",
                    attempt=attempt,
                    max_attempts=attempts,
                    error=str(e),
                )
                if attempt < attempts and self.config.extraction.retry_delay > 0:
                    time.sleep(self.config.extraction.retry_delay)

        raise AgentError(
            f"Remote extraction failed after {attempts} attempts",
            agent_name=AGENT_NAME,
            operation="messages.create",
            api_error=str(last_error),
        )

    def _accept_fields(self, data: dict[str, Any]) -> dict[str, Any]:
        """Map camelCase keys, sanitize, and keep only fields that validate."""
        raw = {
            _CAMEL_TO_FIELD.get(key, key): value
            for key, value in data.items()
            if value is not None
        }
        sanitized = sanitize_loan_data({name: raw[name] for name in LOAN_FIELDS if name in raw})

        accepted = {}
        rejected = []
        for name, value in sanitized.items():
            if validate_field(name, value).is_valid:
                accepted[name] = value
            else:
                rejected.append(name)

        if rejected:
            logger.info("llm_fields_rejected", fields=rejected)

        if not accepted.get("esg_target"):
            accepted["esg_target"] = NO_ESG_TARGET
        return accepted

    def extract(self, document_text: str) -> ExtractionResult:
        """
        Extract loan terms from agreement text.

        Raises:
            AgentError: If the API keeps failing or the reply is not JSON.
        """
        started = time.perf_counter()
        text = preprocess(document_text)
        prompt = build_extraction_prompt(text[: self.config.llm.max_prompt_chars])

        raw_response = self._request(prompt)
        data = parse_json_response(raw_response)
        if data is None:
            raise AgentError(
                "Failed to parse JSON from model response",
                agent_name=AGENT_NAME,
                operation="parse_response",
            )

        fields = self._accept_fields(data)
        confidence, suggestions = score(fields, text)
        record = LoanRecord.from_fields(fields)

        result = ExtractionResult(
            data=record,
            confidence=confidence,
            extracted_fields=record.present_fields(),
            suggestions=suggestions,
            processing_time_ms=(time.perf_counter() - started) * 1000,
            method=self.method,
        )

        logger.info(
            "llm_extraction_complete",
            model=self.config.llm.model,
            fields=len(result.extracted_fields),
            confidence=round(result.confidence, 3),
        )
        return result


def create_llm_extractor(config: Optional[LMABridgeConfig] = None) -> Optional[LLMLoanExtractor]:
    """
    Factory function to create LLMLoanExtractor if available.

    Returns None if the anthropic package is not installed or no API key is
    available, so callers can degrade to the local pattern engine.
    """
    try:
        return LLMLoanExtractor(config=config)
    except ConfigurationError as e:
        logger.info("llm_extractor_unavailable", reason=e.message)
        return None
