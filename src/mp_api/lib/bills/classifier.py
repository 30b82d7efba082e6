"""Bill policy-category classifiers.

Two implementations share the ``BillClassifier`` protocol: a deterministic
keyword scorer, and an OpenAI chat-completions classifier that falls back to
the keyword scorer whenever the model is unavailable or answers outside the
fixed category list.
"""

from typing import Protocol

import httpx
from loguru import logger

from mp_api.core.config import Settings

CATEGORIES: tuple[str, ...] = (
    "Economy & Finance",
    "Health",
    "Housing",
    "Environment & Climate",
    "Justice & Public Safety",
    "Immigration & Citizenship",
    "Indigenous Affairs",
    "Defence & Foreign Affairs",
    "Infrastructure & Transport",
    "Labour & Employment",
    "Education & Youth",
    "Digital, Privacy & AI",
    "Culture, Media & Sport",
    "Government & Democratic Reform",
)

KEYWORDS: dict[str, tuple[str, ...]] = {
    "Economy & Finance": (
        "budget", "tax", "revenue", "fiscal", "economic", "financial",
        "bank", "currency", "trade", "commerce", "tariff", "debt",
    ),
    "Health": (
        "health", "medical", "hospital", "pharmaceutical", "drug", "disease",
        "healthcare", "mental health", "public health", "vaccine",
    ),
    "Housing": ("housing", "rent", "mortgage", "homeless", "affordable housing", "residential", "tenant", "landlord"),
    "Environment & Climate": (
        "environment", "climate", "carbon", "emission", "pollution", "renewable",
        "energy", "green", "sustainability", "wildlife", "conservation",
    ),
    "Justice & Public Safety": (
        "criminal", "justice", "police", "law enforcement", "prison", "sentencing",
        "crime", "safety", "security", "firearm", "gun",
    ),
    "Immigration & Citizenship": (
        "immigration", "immigrant", "refugee", "citizenship", "visa", "border", "asylum", "borders",
    ),
    "Indigenous Affairs": ("indigenous", "first nations", "aboriginal", "inuit", "metis", "reserve", "treaty"),
    "Defence & Foreign Affairs": (
        "defence", "defense", "military", "armed forces", "veteran", "foreign",
        "diplomatic", "international", "nato", "peacekeeping",
    ),
    "Infrastructure & Transport": (
        "infrastructure", "transport", "highway", "road", "railway", "airport",
        "port", "bridge", "transit", "public transit",
    ),
    "Labour & Employment": (
        "labour", "labor", "employment", "worker", "union", "wage", "salary", "workplace", "employment insurance",
    ),
    "Education & Youth": (
        "education", "school", "university", "college", "student", "youth", "child", "learning", "curriculum",
    ),
    "Digital, Privacy & AI": (
        "digital", "privacy", "data", "artificial intelligence", "ai", "cyber",
        "internet", "online", "technology", "tech", "algorithm",
    ),
    "Culture, Media & Sport": (
        "culture", "media", "sport", "arts", "heritage", "broadcasting", "television", "radio", "museum", "library",
    ),
    "Government & Democratic Reform": (
        "government", "democratic", "election", "voting", "parliament", "senate", "electoral", "reform", "constitution",
    ),
}  # fmt: skip

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class BillClassificationError(Exception):
    """Raised when a remote classifier cannot produce an answer.

    Args:
        classifier_name: Name of the failing classifier.
        message: Human-readable error description.
        status_code: Optional HTTP status code from the remote service.
    """

    def __init__(self, classifier_name: str, message: str, status_code: int | None = None) -> None:
        self.classifier_name = classifier_name
        self.message = message
        self.status_code = status_code
        super().__init__(f"{classifier_name}: {message}")


class BillClassifier(Protocol):
    """Maps a bill title to one of :data:`CATEGORIES`, or None."""

    source_name: str

    async def classify(self, title: str, bill_number: str | None = None) -> str | None: ...


def classify_by_keywords(title: str, description: str | None = None) -> str | None:
    """Score every category by how many of its keywords occur in the text.

    Args:
        title: Bill or motion title.
        description: Optional longer description appended to the title.

    Returns:
        The highest-scoring category (earliest in :data:`CATEGORIES` on a
        tie), or None when no keyword occurs.
    """
    text = f"{title} {description or ''}".lower()
    best_category: str | None = None
    best_score = 0
    for category in CATEGORIES:
        score = sum(1 for keyword in KEYWORDS[category] if keyword in text)
        if score > best_score:
            best_category, best_score = category, score
    return best_category


class KeywordBillClassifier:
    """Deterministic keyword classifier."""

    source_name = "keyword"

    async def classify(self, title: str, bill_number: str | None = None) -> str | None:
        return classify_by_keywords(title)


class OpenAIBillClassifier:
    """Chat-completions classifier constrained to :data:`CATEGORIES`.

    Args:
        api_key: OpenAI API key.
        model: Chat completion model name.
        timeout: Request timeout in seconds.
        client: Optional pre-built ``httpx.AsyncClient``.
    """

    source_name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 15.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _build_payload(self, title: str, bill_number: str | None) -> dict:
        numbered = "\n".join(f"{i}. {category}" for i, category in enumerate(CATEGORIES, start=1))
        return {
            "model": self._model,
            "messages": [
                {
                    "role": "system",
                    "content": (
                        "You are a policy categorization assistant. Categorize Canadian parliamentary bills "
                        f"into one of these categories:\n\n{numbered}\n\n"
                        "Return ONLY the exact category name from the list above. "
                        "Do not include any explanation or additional text."
                    ),
                },
                {
                    "role": "user",
                    "content": (
                        f"Categorize this bill:\n\nBill Number: {bill_number or 'N/A'}\nTitle: {title}\n\n"
                        "Return only the category name:"
                    ),
                },
            ],
            "temperature": 0.3,
            "max_tokens": 50,
        }

    async def _request_category(self, title: str, bill_number: str | None) -> str | None:
        """Ask the model for a category.

        Raises:
            BillClassificationError: On timeout, HTTP error or malformed response.
        """
        try:
            response = await self._client.post(
                OPENAI_CHAT_URL,
                json=self._build_payload(title, bill_number),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except httpx.TimeoutException as e:
            raise BillClassificationError("openai", "Classification request timed out") from e
        except httpx.HTTPStatusError as e:
            raise BillClassificationError(
                "openai", f"Provider returned HTTP {e.response.status_code}", status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise BillClassificationError("openai", f"Connection to provider failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise BillClassificationError("openai", f"Failed to parse response: {e}") from e
        return content.strip() if isinstance(content, str) else None

    async def classify(self, title: str, bill_number: str | None = None) -> str | None:
        log = logger.bind(stage="classify")
        try:
            category = await self._request_category(title, bill_number)
        except BillClassificationError as e:
            log.warning(f"OpenAI classification of {bill_number or title!r} failed, using keywords: {e}")
            return classify_by_keywords(title)
        if category in CATEGORIES:
            return category
        log.info(f"OpenAI returned unknown category {category!r} for {bill_number or title!r}, using keywords")
        return classify_by_keywords(title)


def build_classifier(settings: Settings, client: httpx.AsyncClient | None = None) -> BillClassifier:
    """Return the OpenAI classifier when an API key is configured, else the keyword one."""
    if settings.openai_api_key:
        return OpenAIBillClassifier(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.openai_timeout,
            client=client,
        )
    logger.info("OPENAI_API_KEY not set, using keyword bill classification")
    return KeywordBillClassifier()
