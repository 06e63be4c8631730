"""External sentiment classifiers.

The scorer depends only on the SentimentClassifier interface. The concrete
HuggingFaceClassifier posts a short market description to a hosted text
classification model (FinBERT by default) using urllib.request on a worker
thread, so the event loop never blocks on the network.

Any failure is raised as ExternalServiceError; deciding what to do about it
is the scorer's job.
"""

import asyncio
import json
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from forecaster.config import SentimentSettings
from forecaster.exceptions import ExternalServiceError
from forecaster.logging import get_logger

logger = get_logger(__name__)

#: Labels the scorer knows how to turn into a direction.
KNOWN_LABELS = frozenset({"positive", "negative", "neutral"})


@dataclass(frozen=True)
class ClassifierVerdict:
    """Winning label and its strength (0-1) from a classifier reply."""

    label: str
    score: Decimal


class SentimentClassifier(ABC):
    """Abstract base class for sentiment classification services."""

    @abstractmethod
    async def classify(self, text: str) -> ClassifierVerdict:
        """Classify ``text``. Raises ExternalServiceError on any failure."""
        ...


def parse_classifier_reply(payload: object) -> ClassifierVerdict:
    """Pick the highest-scoring ``{label, score}`` entry from a reply.

    Accepts a flat list or a list nested one level deep, which is how the
    HuggingFace inference API wraps single-input results.
    """
    entries = payload
    if isinstance(entries, list) and entries and isinstance(entries[0], list):
        entries = entries[0]
    if not isinstance(entries, list) or not entries:
        raise ExternalServiceError(f"Unexpected classifier payload: {payload!r}")

    best: ClassifierVerdict | None = None
    for entry in entries:
        if not isinstance(entry, dict) or "label" not in entry or "score" not in entry:
            raise ExternalServiceError(f"Malformed classifier entry: {entry!r}")
        label = str(entry["label"]).lower()
        try:
            score = Decimal(str(entry["score"]))
        except InvalidOperation as e:
            raise ExternalServiceError(f"Non-numeric score: {entry['score']!r}") from e
        if not score.is_finite() or not Decimal("0") <= score <= Decimal("1"):
            raise ExternalServiceError(f"Score out of range: {score}")
        if best is None or score > best.score:
            best = ClassifierVerdict(label=label, score=score)

    if best.label not in KNOWN_LABELS:
        raise ExternalServiceError(f"Unknown sentiment label: {best.label}")
    return best


class HuggingFaceClassifier(SentimentClassifier):
    """Text classification over the HuggingFace inference API.

    Args:
        settings: Endpoint, API key and timeout.
    """

    def __init__(self, settings: SentimentSettings) -> None:
        self._settings = settings

    def _post(self, text: str) -> object:
        body = json.dumps({"inputs": text}).encode("utf-8")
        headers = {
            "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        req = urllib.request.Request(
            self._settings.endpoint, data=body, headers=headers, method="POST"
        )
        try:
            with urllib.request.urlopen(req, timeout=self._settings.timeout_seconds) as resp:
                return json.loads(resp.read())
        except urllib.error.HTTPError as e:
            raise ExternalServiceError(f"Classifier returned HTTP {e.code}") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise ExternalServiceError(f"Classifier unreachable: {e}") from e
        except ValueError as e:
            raise ExternalServiceError("Classifier returned invalid JSON") from e

    async def classify(self, text: str) -> ClassifierVerdict:
        payload = await asyncio.to_thread(self._post, text)
        verdict = parse_classifier_reply(payload)
        logger.debug("classifier_verdict", label=verdict.label, score=str(verdict.score))
        return verdict
