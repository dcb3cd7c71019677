import re
import json
import logging
from json import JSONDecodeError
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from kitchen.domain.InsightReport import InsightReport
from kitchen.logic.insights.errors import InsightResponseError, InsightUnavailableError
from kitchen.utilities.config import COMMISSION_RATE, OPENAI_API_KEY, OPENAI_MODEL
from kitchen.utilities.constants import INSIGHT_JSON_FORMAT, ORDERS_HEADER, PROMPT_TEMPLATE
from kitchen.utilities.validators import InsightReportSchema

logger = logging.getLogger(__name__)


# === Prompt ===
def build_prompt(orders: List[Dict[str, Any]], user_name: str, commission_rate: float = COMMISSION_RATE) -> str:
    """Compose the analysis prompt: instructions, expected JSON shape, then the orders."""
    header = PROMPT_TEMPLATE.format(
        user_name=user_name,
        commission_pct=round(commission_rate * 100, 2),
        count=len(orders),
    )
    payload = json.dumps(orders, ensure_ascii=False, default=str)
    return header + INSIGHT_JSON_FORMAT + ORDERS_HEADER + payload


# === Response Parsing ===
def parse_insight_report(text: str) -> InsightReport:
    """Turn the model's output text into an InsightReport or raise InsightResponseError."""
    text = (text or "").strip()
    if not text:
        raise InsightResponseError("Analysis service returned an empty response")

    try:
        parsed = json.loads(text)
    except JSONDecodeError:
        cleaned = _remove_trailing_commas(_strip_code_fences(text))
        candidate = _extract_json_by_balancing(cleaned)
        if candidate is None:
            raise InsightResponseError("Analysis output contains no JSON object")
        try:
            parsed = json.loads(_remove_trailing_commas(candidate))
        except JSONDecodeError as e:
            raise InsightResponseError(f"Analysis output is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise InsightResponseError("Analysis output is not a JSON object")
    try:
        schema = InsightReportSchema.model_validate(parsed)
    except ValidationError as e:
        raise InsightResponseError(f"Analysis output does not match the report format: {e}") from e
    return InsightReport.from_dict(schema.model_dump())


# === Text Cleaning Helpers ===
def _strip_code_fences(text: str) -> str:
    """Remove common markdown code fences and leading/trailing whitespace."""
    text = re.sub(r"```(?:json)?\n(.*?)```", r"\1", text, flags=re.S)
    text = re.sub(r"^```|```$", "", text)
    return text.strip()


def _remove_trailing_commas(text: str) -> str:
    return re.sub(r",\s*(\}|\])", r"\1", text)


def _extract_json_by_balancing(text: str) -> Optional[str]:
    """Extract the first JSON object by balancing braces/brackets."""
    start = None
    stack = []
    in_string = False
    escape = False

    for i, ch in enumerate(text):
        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            if start is not None:
                in_string = True
            continue
        if ch == "{" and start is None:
            start = i
        if start is None:
            continue
        if ch in "{[":
            stack.append(ch)
        elif ch in "}]":
            opening = stack.pop()
            if (opening == "{" and ch != "}") or (opening == "[" and ch != "]"):
                return None
            if not stack:
                return text[start:i + 1]
    return None


# === OpenAI Analyzer ===
class OpenAIInsightAnalyzer:
    """Asks an OpenAI model for a kitchen insight report over the full order list.

    Results are never cached: the narrative fields differ between calls.
    """

    def __init__(self, api_key: Optional[str] = None, model: str = OPENAI_MODEL,
                 commission_rate: float = COMMISSION_RATE, client: Optional[AsyncOpenAI] = None):
        self.api_key = OPENAI_API_KEY if api_key is None else api_key
        self.model = model
        self.commission_rate = commission_rate
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self.api_key:
                raise InsightUnavailableError("OPENAI_API_KEY not set; cannot analyze orders")
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def analyze(self, orders: List[Dict[str, Any]], user_name: str) -> InsightReport:
        client = self._get_client()
        prompt = build_prompt(orders, user_name, self.commission_rate)
        logger.info(f"Requesting analysis of {len(orders)} orders from {self.model}")
        response = await client.responses.create(model=self.model, input=prompt)
        return parse_insight_report(response.output_text)
