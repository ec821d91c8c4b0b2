"""Shared fixtures for the sentiment engine tests."""

import pytest

from sentiment_analysis import SentimentEngine
from text_normalizer import TextNormalizer


@pytest.fixture(scope="session")
def engine():
    return SentimentEngine()


@pytest.fixture
def normalizer():
    return TextNormalizer()
