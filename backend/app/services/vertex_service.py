"""
Ulyngo Backend — Vertex AI Gemini Intent Extractor
====================================================

What:  Concrete IntentExtractor that asks Gemini on Vertex AI to turn a
       free-text trip request into an ExtractedIntent.
How:   Builds a fixed few-shot prompt around the sentence, POSTs one
       `generateContent` request with a bearer token from Application
       Default Credentials, strips code fences from the first candidate's
       text and validates the JSON against ExtractedIntent.
Who:   Constructed once in the app lifespan with the shared httpx client;
       called by TripPlanner for every POST /api/plan-trip.

Failure Handling:
    Every failure is terminal for the call. There is no retry and no
    circuit breaker: a failed extraction fails the planning request.
        missing project/location, no credentials  → ConfigurationError
        transport error, HTTP status != 200       → UpstreamError
        no candidates, malformed JSON             → ParseError
"""

import json
import logging
import re
import time
from typing import Awaitable, Callable, Optional

import google.auth
import google.auth.exceptions
import httpx
from google.auth.transport.requests import Request as GoogleAuthRequest
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from app.exceptions import ConfigurationError, ParseError, UpstreamError
from app.schemas.trip import ExtractedIntent
from app.services.llm_base import IntentExtractor

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

_CODE_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z]*\s*")
_CODE_FENCE_CLOSE = re.compile(r"\s*```\s*$")


class GoogleAccessTokenProvider:
    """
    Supplies OAuth access tokens from Application Default Credentials.

    Credentials are discovered on first use and refreshed only when the
    cached token has expired. google-auth refreshes synchronously, so the
    refresh runs in the threadpool.
    """

    def __init__(self, scopes: tuple = (CLOUD_PLATFORM_SCOPE,)):
        self._scopes = list(scopes)
        self._credentials = None

    def _refresh_sync(self) -> str:
        try:
            if self._credentials is None:
                self._credentials, _ = google.auth.default(scopes=self._scopes)
            if not self._credentials.valid:
                self._credentials.refresh(GoogleAuthRequest())
        except google.auth.exceptions.GoogleAuthError as e:
            raise ConfigurationError(
                message="Could not obtain Google Cloud credentials",
                details=str(e),
                context={"error_type": type(e).__name__},
            ) from e
        return self._credentials.token

    async def __call__(self) -> str:
        return await run_in_threadpool(self._refresh_sync)


def strip_code_fences(text: str) -> str:
    """Removes a leading ```json / ``` fence and a trailing ``` fence."""
    text = _CODE_FENCE_OPEN.sub("", text, count=1)
    text = _CODE_FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


class VertexIntentExtractor(IntentExtractor):
    """
    Gemini (Vertex AI REST) implementation of IntentExtractor.

    Args:
        http_client:    Shared httpx.AsyncClient (owned by the app lifespan)
        project_id:     GOOGLE_VERTEX_AI_PROJECT_ID
        location:       GOOGLE_VERTEX_AI_LOCATION, e.g. "us-central1"
        model:          Publisher model id, e.g. "gemini-2.0-flash-001"
        token_provider: Async callable returning a bearer token
    """

    PROMPT_TEMPLATE = """Extract the travel plan in the sentence below into strict JSON. \
The sentences are usually Indonesian; keep place and food names as written.
Sentence: "{sentence}"

Rules:
1. "destination": a specific place name. Add the city or country when you can.
2. "travel_mode": an object describing how the user travels.
   - "mode": infer the transport mode with this priority:
     a. Explicit: "mobil" means "driving"; "motor", "motoran" or "touring" means "motorcycle".
     b. Implicit: phrases that strongly suggest a motorbike in Indonesia, such as
        "jalan tikus", "rute alternatif cepat", "selap-selip" or "hindari ganjil-genap",
        mean "motorcycle" even if the word "motor" is absent.
     c. Default: with no hint at all, use "driving".
   - "preferences": route preferences, e.g. "jangan lewat tol" becomes "avoid_tolls",
     "hindari jalan raya" becomes "avoid_highways".
3. "stops_along_the_way": foods, drinks or short activities wanted during the trip.
4. "return_trip_plan": what the user wants to do or buy on the way back.
5. Use empty values ("", [], {{}}) for anything not mentioned.
Return only the JSON object.

---
Example 1
Sentence: "Rute motoran ke Puncak, tapi jangan lewat tol ya."
JSON:
{{"destination": "Puncak, Bogor, Indonesia", "travel_mode": {{"mode": "motorcycle", "preferences": ["avoid_tolls"]}}, "stops_along_the_way": [], "return_trip_plan": ""}}
---
Example 2
Sentence: "Mau ke Kota Tua dari Bekasi, cariin jalan tikus dong biar cepet nyampe."
JSON:
{{"destination": "Kota Tua, Jakarta, Indonesia", "travel_mode": {{"mode": "motorcycle", "preferences": []}}, "stops_along_the_way": [], "return_trip_plan": ""}}
---
Example 3
Sentence: "Tolong dong rute ke Lembang, mau beli oleh-oleh bolu susu."
JSON:
{{"destination": "Lembang, Bandung Barat, Indonesia", "travel_mode": {{"mode": "driving", "preferences": []}}, "stops_along_the_way": [], "return_trip_plan": "beli oleh-oleh bolu susu"}}
---
Example 4
Sentence: "Aku mau ke Jalan Braga Bandung naik mobil, di jalan pengen jajan cimol sama thai tea. Pulangnya mau beli oleh-oleh bolu susu lembang."
JSON:
{{"destination": "Jalan Braga, Bandung, Indonesia", "travel_mode": {{"mode": "driving", "preferences": []}}, "stops_along_the_way": ["cimol", "thai tea"], "return_trip_plan": "beli oleh-oleh bolu susu lembang"}}
---
Example 5
Sentence: "Rute motoran ke Puncak, tapi jangan lewat tol ya. Pengen ngopi dulu di jalan."
JSON:
{{"destination": "Puncak, Bogor, Indonesia", "travel_mode": {{"mode": "motorcycle", "preferences": ["avoid_tolls"]}}, "stops_along_the_way": ["ngopi"], "return_trip_plan": ""}}
---

JSON:
"""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        project_id: str,
        location: str,
        model: str,
        token_provider: Optional[Callable[[], Awaitable[str]]] = None,
    ):
        self._http = http_client
        self._project_id = project_id
        self._location = location
        self._model = model
        self._token_provider = token_provider or GoogleAccessTokenProvider()

        logger.info(
            "VertexIntentExtractor initialized with model=%s, location=%s, configured=%s",
            model,
            location or "-",
            self.is_configured,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self._project_id and self._location)

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/projects/{self._project_id}"
            f"/locations/{self._location}/publishers/google/models/{self._model}:generateContent"
        )

    def build_prompt(self, sentence: str) -> str:
        return self.PROMPT_TEMPLATE.format(sentence=sentence.replace('"', "'"))

    def build_payload(self, sentence: str) -> dict:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": self.build_prompt(sentence)}],
                }
            ]
        }

    async def extract(self, sentence: str) -> ExtractedIntent:
        """
        Flow:
            1. Check project/location → ConfigurationError
            2. Fetch a bearer token → ConfigurationError
            3. POST generateContent once → UpstreamError on failure
            4. Pull the first candidate's text, strip fences, validate
               → ParseError on failure
        """
        if not self.is_configured:
            raise ConfigurationError(
                message="Vertex AI is not configured",
                details=(
                    "Set GOOGLE_VERTEX_AI_PROJECT_ID and GOOGLE_VERTEX_AI_LOCATION"
                ),
            )

        token = await self._token_provider()
        start_time = time.perf_counter()

        try:
            response = await self._http.post(
                self.endpoint,
                json=self.build_payload(sentence),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as e:
            logger.warning("Vertex AI request failed: %s", type(e).__name__)
            raise UpstreamError(
                message="Failed to call Vertex AI",
                body=str(e) or type(e).__name__,
                context={"error_type": type(e).__name__},
            ) from e

        duration_ms = (time.perf_counter() - start_time) * 1000

        if response.status_code != 200:
            logger.warning(
                "Vertex AI returned HTTP %d after %.0fms. Raw response: %s",
                response.status_code,
                duration_ms,
                response.text,
            )
            raise UpstreamError(
                message=f"Vertex AI returned HTTP {response.status_code}",
                upstream_status=response.status_code,
                body=response.text,
            )

        text = self._candidate_text(response)
        intent = self._parse_intent(text)

        logger.info(
            "Vertex AI extraction completed in %.0fms: destination=%r, %d stops, return_plan=%s",
            duration_ms,
            intent.destination,
            len(intent.stops_along_the_way),
            bool(intent.return_trip_plan),
        )
        return intent

    @staticmethod
    def _candidate_text(response: httpx.Response) -> str:
        try:
            body = response.json()
            parts = body["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.warning("Vertex AI response had no usable candidate: %s", response.text)
            raise ParseError(
                message="Vertex AI response contained no candidates",
                body=response.text,
                context={"error_type": type(e).__name__},
            ) from e

    @staticmethod
    def _parse_intent(text: str) -> ExtractedIntent:
        cleaned = strip_code_fences(text)
        try:
            data = json.loads(cleaned)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return ExtractedIntent.model_validate(data)
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Could not parse intent JSON from model text: %s", cleaned)
            raise ParseError(
                message="Failed to parse trip details from Vertex AI text",
                body=cleaned,
                context={"error": str(e)},
            ) from e
