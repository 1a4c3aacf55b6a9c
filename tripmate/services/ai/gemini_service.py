"""
Gemini Services for Tripmate

DESIGN DECISION: Gemini is treated as an opaque suggestion service.

CRITICAL BOUNDARIES:

1. RECEIPT SCANNER:
   - CAN: Read a receipt photo and propose {title, amount, date}
   - CANNOT: Add an expense. The suggestion goes through the same
     validation as manual entry before anything is dispatched

2. TRIP ASSISTANT:
   - CAN: Answer free-text questions using a read-only trip summary
   - CANNOT: Change the trip

Both services are async; nothing in the trip core waits on them.
Failures are raised as AIServiceError subclasses so the caller can fall
back to manual entry.
"""

import json
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import BytesIO
from typing import Any, Callable, Optional

import google.generativeai as genai
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, Field, ValidationError, field_validator
from tenacity import retry, retry_if_not_exception_type, stop_after_attempt, wait_exponential

from tripmate.aggregates import compute_aggregates
from tripmate.config import GeminiSettings, get_settings
from tripmate.models.trip import ExpenseCategory, Trip

ModelFactory = Callable[[str, Optional[str], dict], Any]


class AIServiceError(Exception):
    """Base exception for Gemini collaborator errors."""
    pass


class ReceiptScanError(AIServiceError):
    """The receipt could not be read."""
    pass


class AssistantError(AIServiceError):
    """The assistant could not produce an answer."""
    pass


class ReceiptSuggestion(BaseModel):
    """
    What the scanner thinks the receipt says.

    CRITICAL: This is PROPOSED data, NOT verified.
    """

    title: str = Field(..., min_length=1, max_length=200)
    amount: Decimal
    date: date

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> Decimal:
        """Models return floats; keep two decimal places."""
        try:
            return Decimal(str(v)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        except (InvalidOperation, TypeError, ValueError):
            raise ValueError(f"Amount is not a number: {v!r}")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        """Accept YYYY-MM-DD plus a few common receipt formats."""
        if isinstance(v, str):
            for fmt in ["%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d"]:
                try:
                    return datetime.strptime(v.strip(), fmt).date()
                except ValueError:
                    continue
        return v


RECEIPT_PROMPT = (
    'Analyze this receipt and extract the store name or main purchase item as "title", '
    'the total amount as "amount", and the date as "date". '
    "Provide the date in YYYY-MM-DD format. "
    'Respond with ONLY a JSON object: {"title": "...", "amount": 0.0, "date": "YYYY-MM-DD"}'
)

RECEIPT_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "amount": {"type": "NUMBER"},
        "date": {"type": "STRING", "description": "Date in YYYY-MM-DD format"},
    },
    "required": ["title", "amount", "date"],
}

PRO_MODEL_KEYWORDS = ("budget", "estimate")


def _default_model_factory(
    model_name: str,
    system_instruction: Optional[str],
    generation_config: dict,
) -> Any:
    return genai.GenerativeModel(
        model_name=model_name,
        system_instruction=system_instruction,
        generation_config=generation_config,
    )


def _extract_json(text: str) -> dict:
    """Pull the first JSON object out of a model response."""
    text = text.strip()
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("No JSON object in model response")
    return json.loads(text[start:end])


class _GeminiService:
    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model_factory: Optional[ModelFactory] = None,
    ):
        self._settings = settings or get_settings().gemini
        if model_factory is None:
            genai.configure(api_key=self._settings.api_key)
            model_factory = _default_model_factory
        self._model_factory = model_factory


class ReceiptScanner(_GeminiService):
    """
    Reads receipt photos with Gemini.

    The image is checked locally with Pillow first, so unreadable or
    oversized uploads never reach the API.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model_factory: Optional[ModelFactory] = None,
        max_image_bytes: Optional[int] = None,
    ):
        super().__init__(settings, model_factory)
        self._max_image_bytes = max_image_bytes or get_settings().app.max_image_size_bytes

    def detect_mime_type(self, image_bytes: bytes) -> str:
        """
        Identify the image format.

        Raises:
            ReceiptScanError: empty, oversized, or not an image
        """
        if not image_bytes:
            raise ReceiptScanError("Receipt image is empty")
        if len(image_bytes) > self._max_image_bytes:
            raise ReceiptScanError(
                f"Receipt image is too large ({len(image_bytes)} bytes, "
                f"limit {self._max_image_bytes})"
            )
        try:
            with Image.open(BytesIO(image_bytes)) as img:
                image_format = img.format
        except (UnidentifiedImageError, OSError) as e:
            raise ReceiptScanError(f"File is not a readable image: {e}") from e

        mime_type = Image.MIME.get(image_format or "")
        if mime_type is None:
            raise ReceiptScanError(f"Unsupported image format: {image_format}")
        return mime_type

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_not_exception_type(AIServiceError),
        reraise=True,
    )
    async def _generate(self, image_bytes: bytes, mime_type: str) -> str:
        model = self._model_factory(
            self._settings.model_name,
            None,
            {
                "temperature": self._settings.temperature,
                "max_output_tokens": 512,
                "response_mime_type": "application/json",
                "response_schema": RECEIPT_RESPONSE_SCHEMA,
            },
        )
        response = await model.generate_content_async([
            {"mime_type": mime_type, "data": image_bytes},
            RECEIPT_PROMPT,
        ])
        return response.text

    async def scan_receipt(
        self,
        image_bytes: bytes,
        mime_type: Optional[str] = None,
    ) -> ReceiptSuggestion:
        """
        Propose an expense from a receipt photo.

        Raises:
            ReceiptScanError: the image or the model response is unusable
        """
        detected = self.detect_mime_type(image_bytes)
        mime_type = mime_type or detected

        try:
            text = await self._generate(image_bytes, mime_type)
        except AIServiceError:
            raise
        except Exception as e:
            raise ReceiptScanError(f"Receipt scan failed: {e}") from e

        try:
            return ReceiptSuggestion.model_validate(_extract_json(text))
        except (ValueError, ValidationError) as e:
            raise ReceiptScanError(f"Could not read receipt: {e}") from e


def build_trip_context(trip: Trip) -> str:
    """
    Read-only summary of the trip given to the assistant.

    Only counts and totals; no ids.
    """
    aggregates = compute_aggregates(trip)
    members = ", ".join(member.name for member in trip.members) or "none"
    categories = ", ".join(category.value for category in ExpenseCategory)
    return (
        "You are a helpful travel assistant integrated into a trip management app.\n"
        "Your goal is to provide concise, relevant, and useful information to the user "
        "based on their trip data.\n"
        "Current trip context:\n"
        f"- Trip Name: {trip.name}\n"
        f"- Members: {members}\n"
        f"- Luggage items packed: {len(trip.luggage)}\n"
        f"- Expenses recorded: {len(trip.expenses)}\n"
        f"- Total money collected: {aggregates.total_contributions}\n"
        f"- Total money spent: {aggregates.total_expenses}\n"
        "\n"
        f"When asked to suggest an expense category, choose from: {categories}.\n"
        "Be friendly and helpful."
    )


class TripAssistant(_GeminiService):
    """
    Free-text chat about the current trip.

    Questions about budgets or estimates go to the pro model with a
    larger output allowance; everything else uses the flash model.
    """

    def select_model(self, prompt: str) -> tuple[str, int]:
        """Return (model_name, max_output_tokens) for this prompt."""
        lowered = prompt.lower()
        if any(keyword in lowered for keyword in PRO_MODEL_KEYWORDS):
            return self._settings.pro_model_name, self._settings.pro_max_tokens
        return self._settings.model_name, self._settings.max_tokens

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_not_exception_type(AIServiceError),
        reraise=True,
    )
    async def _generate(self, prompt: str, model_name: str, max_tokens: int, context: str) -> str:
        model = self._model_factory(
            model_name,
            context,
            {
                "temperature": self._settings.temperature,
                "max_output_tokens": max_tokens,
            },
        )
        response = await model.generate_content_async(prompt)
        return response.text

    async def ask(self, prompt: str, trip: Trip) -> str:
        """
        Answer a question about the trip.

        Raises:
            AssistantError: empty prompt, or the model call failed
        """
        if not prompt or not prompt.strip():
            raise AssistantError("Question cannot be empty")

        model_name, max_tokens = self.select_model(prompt)
        try:
            text = await self._generate(prompt, model_name, max_tokens, build_trip_context(trip))
        except AIServiceError:
            raise
        except Exception as e:
            raise AssistantError(f"Assistant request failed: {e}") from e

        if not text or not text.strip():
            raise AssistantError("Assistant returned an empty answer")
        return text.strip()
