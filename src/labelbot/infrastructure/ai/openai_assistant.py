"""
Language model helpers.

Explains portal failures to requesters in plain words and turns
spreadsheet rows into shipment records.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional, Sequence

from openai import OpenAI, OpenAIError

from labelbot.config.models import AIConfig
from labelbot.core.exceptions import ERROR_MESSAGES, AccountErrorKind, ValidationError
from labelbot.core.models import Shipment, validate_shipment
from labelbot.infrastructure.logging import get_logger

FALLBACK_EXPLANATION = ERROR_MESSAGES[AccountErrorKind.ERROR]

EXPLAIN_PROMPT = (
    "You explain shipping label errors to the warehouse staff who requested the label. "
    "Answer in one or two short sentences of plain English without technical jargon."
)

EXTRACT_PROMPT = (
    "Convert one spreadsheet row into a JSON shipment with the keys "
    '"From" (FullName, Company, Address1, Address2, Address3, City, State, ZIPCode, PhoneNumber) and '
    '"To" (recipient_name, recipient_phone, recipient_postcode, address1, address2, city, state, '
    "weight_lb, length_in, width_in, height_in, mail_class). "
    'States are two letter US abbreviations, weight is in pounds, mail_class is "USPM" for Priority '
    'Mail and "USGA" for Ground. Omit optional values that are missing. Reply with the JSON object only.'
)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


def strip_code_fence(text: str) -> str:
    return _FENCE.sub("", text.strip()).strip()


class OpenAIAssistant:
    """Chat completion client used for explanations and row extraction."""

    def __init__(self, config: AIConfig, *, client: Optional[Any] = None, logger=None):
        self.config = config
        self.client = client or OpenAI(api_key=config.api_key, base_url=config.base_url)
        self.logger = (logger or get_logger()).bind(component="ai")

    def _complete(self, system: str, user: str, **kwargs: Any) -> str:
        resp = self.client.chat.completions.create(
            model=self.config.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            **kwargs,
        )
        return resp.choices[0].message.content or ""

    def explain(self, error_text: str) -> str:
        """Plain-language explanation of ``error_text``; never raises."""

        try:
            answer = self._complete(EXPLAIN_PROMPT, error_text, temperature=0.3, max_tokens=200).strip()
        except Exception as e:
            self.logger.error("Error explanation failed", error=str(e))
            return FALLBACK_EXPLANATION
        return answer or FALLBACK_EXPLANATION

    def extract(self, header: Sequence[str], record: Sequence[str]) -> Shipment:
        """
        Build a shipment from one spreadsheet row.

        Raises:
            ValidationError: When the model output is not a valid shipment.
        """
        user = f"Header: {', '.join(header)}\nRecord: {', '.join(record)}"
        try:
            raw = self._complete(EXTRACT_PROMPT, user, temperature=0.2, response_format={"type": "json_object"})
        except OpenAIError as e:
            raise ValidationError("Shipment extraction failed", {"__root__": str(e)}, cause=e) from e
        try:
            data = json.loads(strip_code_fence(raw) or "{}")
        except json.JSONDecodeError as e:
            raise ValidationError("Extracted shipment is not JSON", {"__root__": e.msg}, cause=e) from e
        return validate_shipment(data)


class PassthroughExplainer:
    """Returns the error text itself; used when no model is configured."""

    def explain(self, error_text: str) -> str:
        return error_text or FALLBACK_EXPLANATION


__all__ = ["OpenAIAssistant", "PassthroughExplainer", "FALLBACK_EXPLANATION", "strip_code_fence"]
