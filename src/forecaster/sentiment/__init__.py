"""Sentiment scoring: rule-based technical score with an optional ML classifier."""

from forecaster.sentiment.classifier import (
    ClassifierVerdict,
    HuggingFaceClassifier,
    SentimentClassifier,
)
from forecaster.sentiment.scorer import SentimentScorer, compute_technical_score

__all__ = [
    "ClassifierVerdict",
    "HuggingFaceClassifier",
    "SentimentClassifier",
    "SentimentScorer",
    "compute_technical_score",
]
