"""
Ulyngo Backend — Abstract Intent Extractor Interface
======================================================

What:  Abstract base class defining the contract for turning a free-text
       trip request into structured trip fields.
How:   Concrete implementations inherit from IntentExtractor and implement
       extract(). VertexIntentExtractor is the production one; tests use
       AsyncMock(spec=IntentExtractor) or small fakes.
Who:   Called by TripPlanner as stage 1 of plan_trip().
"""

from abc import ABC, abstractmethod

from app.schemas.trip import ExtractedIntent


class IntentExtractor(ABC):
    """
    Abstract interface for natural-language trip intent extraction.

    Contract:
        - extract() makes at most one outbound call and never retries
        - Provider errors are translated into ConfigurationError,
          UpstreamError or ParseError; nothing provider-specific escapes
        - No local state is mutated by a call
    """

    @abstractmethod
    async def extract(self, sentence: str) -> ExtractedIntent:
        """
        Extract destination, stops and return-trip plan from a sentence.

        Args:
            sentence: Arbitrary user text. May be empty; an empty sentence
                      is a valid call that will likely yield no destination.

        Returns:
            ExtractedIntent. destination == "" when none could be found.

        Raises:
            ConfigurationError: Provider credentials or identifiers missing.
            UpstreamError: Transport failure or non-success response,
                carrying the raw status and body.
            ParseError: Response text is not the expected JSON structure.
        """
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """True when every identifier the provider needs is present."""
        ...
