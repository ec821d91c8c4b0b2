#!/usr/bin/env python3
# Sentiment Analysis with lexicon rules and score normalization

import logging
import re
import sys
from dataclasses import asdict, dataclass, field, replace
from typing import NamedTuple

import numpy as np

from keyword_extraction import KeywordExtractor
from sentiment_lexicon import DEFAULT_LEXICON, NEGATIVE, NEUTRAL, POSITIVE, SENTIMENTS
from text_normalizer import (
    ANGER_EMOJI, EXCITEMENT, LOVE_EMOJI, NEGATED, NEGATIVE_EMOJI, NEGATIVE_EMOTICON,
    NEUTRAL_EMOJI, NEUTRAL_EMOTICON, POSITIVE_EMOJI, POSITIVE_EMOTICON, WORD,
    TextNormalizer,
)

logger = logging.getLogger(__name__)

# Label identifiers in the ranked output
LABELS = {
    NEGATIVE: 'LABEL_0',
    NEUTRAL: 'LABEL_1',
    POSITIVE: 'LABEL_2',
}
LABEL_SENTIMENTS = {label: sentiment for sentiment, label in LABELS.items()}

# Equal scores rank in this order
TIE_PRIORITY = {POSITIVE: 0, NEGATIVE: 1, NEUTRAL: 2}

POSITIVE_MOODS = frozenset([POSITIVE_EMOJI, LOVE_EMOJI, POSITIVE_EMOTICON])
NEGATIVE_MOODS = frozenset([NEGATIVE_EMOJI, ANGER_EMOJI, NEGATIVE_EMOTICON])
NEUTRAL_MOODS = frozenset([NEUTRAL_EMOJI, NEUTRAL_EMOTICON])

# Contextual corrections: (trigger substrings, class, weight name)
CONTEXT_RULES = [
    (('better than', 'superior to'), POSITIVE, 'comparison_weight'),
    (('worse than', 'inferior to'), NEGATIVE, 'comparison_weight'),
    (('satisfied', 'pleased'), POSITIVE, 'satisfaction_weight'),
    (('disappointed', 'unsatisfied'), NEGATIVE, 'satisfaction_weight'),
    (('high quality', 'premium'), POSITIVE, 'quality_weight'),
    (('low quality', 'cheap'), NEGATIVE, 'quality_weight'),
]
RECOMMENDATION_TRIGGERS = ('recommend', 'suggest')
SERVICE_TRIGGERS = ('customer service', 'support')
SERVICE_POSITIVE = ('excellent', 'great')
SERVICE_NEGATIVE = ('poor', 'terrible')


def label_to_sentiment(label):
    """Map a label identifier to its sentiment name, neutral for unknown labels"""
    return LABEL_SENTIMENTS.get(label, NEUTRAL)


@dataclass(frozen=True)
class ScoringWeights:
    """Calibration constants for feature extraction and score composition."""
    base_neutral: float = 0.3
    phrase_weight: float = 0.8
    neutral_phrase_weight: float = 0.6
    word_weight: float = 0.4
    neutral_word_weight: float = 0.3
    word_intensifier_factor: float = 1.5
    strong_weight: float = 1.0
    emoji_weight: float = 0.6
    excitement_weight: float = 0.4
    comparison_weight: float = 0.3
    recommendation_weight: float = 0.5
    satisfaction_weight: float = 0.4
    quality_weight: float = 0.4
    service_weight: float = 0.5
    service_window: int = 20
    intensifier_factor: float = 1.4
    diminisher_factor: float = 0.8
    diminisher_neutral_factor: float = 1.2
    strong_override_factor: float = 2.0
    strong_neutral_factor: float = 0.3
    score_floor: float = 0.05
    # (positive, negative, neutral)
    default_distribution: tuple = (0.25, 0.15, 0.6)
    fallback_features: tuple = (0.3, 0.3, 0.4)

    def __post_init__(self):
        if self.phrase_weight <= self.word_weight:
            raise ValueError("phrase_weight must be greater than word_weight")
        if not 0 <= self.score_floor < 1 / 3:
            raise ValueError("score_floor must be in [0, 1/3)")
        if len(self.default_distribution) != 3 or abs(sum(self.default_distribution) - 1) > 1e-9:
            raise ValueError("default_distribution must hold three scores summing to 1")

    def replace(self, **changes):
        return replace(self, **changes)


class LabelScore(NamedTuple):
    label: str
    score: float

    @property
    def sentiment(self):
        return label_to_sentiment(self.label)


@dataclass(frozen=True)
class SentimentScoreDistribution:
    """Three label/score pairs, highest score first, summing to 1."""
    scores: tuple

    @classmethod
    def from_scores(cls, by_sentiment):
        ranked = sorted(
            SENTIMENTS,
            key=lambda sentiment: (-by_sentiment[sentiment], TIE_PRIORITY[sentiment]),
        )
        return cls(tuple(LabelScore(LABELS[s], float(by_sentiment[s])) for s in ranked))

    @classmethod
    def default(cls, weights):
        return cls.from_scores(dict(zip(SENTIMENTS, weights.default_distribution)))

    def __iter__(self):
        return iter(self.scores)

    def __len__(self):
        return len(self.scores)

    def __getitem__(self, index):
        return self.scores[index]

    @property
    def top(self):
        return self.scores[0]

    @property
    def sentiment(self):
        return self.top.sentiment

    @property
    def confidence(self):
        return self.top.score

    def as_dict(self):
        return {item.sentiment: item.score for item in self.scores}

    def to_list(self):
        return [{'label': item.label, 'score': item.score} for item in self.scores]


@dataclass(frozen=True)
class FeatureVector:
    """Raw per-class accumulators and detected signals for one text.

    The ``anchored_*`` accumulators hold contributions already resolved
    against negation (strong indicators and the recommendation rule); the
    negation swap leaves them in place.
    """
    positive_score: float
    negative_score: float
    neutral_score: float
    anchored_positive: float = 0.0
    anchored_negative: float = 0.0
    has_negation: bool = False
    has_intensifier: bool = False
    has_diminisher: bool = False
    has_strong_positive: bool = False
    has_strong_negative: bool = False
    matches: list = field(default_factory=list, compare=False)

    @classmethod
    def fallback(cls, weights):
        positive, negative, neutral = weights.fallback_features
        return cls(positive, negative, neutral)


def _word_pattern(word):
    return re.compile(r'\b' + re.escape(word) + r'\b')


class FeatureExtractor:
    """Scores a normalized text against the lexicon tables."""

    def __init__(self, lexicon=DEFAULT_LEXICON, weights=None):
        self.lexicon = lexicon
        self.weights = weights or ScoringWeights()
        intensifiers = '|'.join(re.escape(word) for word in sorted(lexicon.intensifiers))
        self.word_patterns = {}
        for sentiment in SENTIMENTS:
            self.word_patterns[sentiment] = [
                (
                    word,
                    _word_pattern(word),
                    re.compile(r'\b(?:' + intensifiers + r')\s+' + re.escape(word) + r'\b')
                    if intensifiers else None,
                )
                for word in sorted(lexicon.words[sentiment])
            ]
        self.phrases = {sentiment: sorted(lexicon.phrases[sentiment]) for sentiment in SENTIMENTS}

    def extract(self, normalized):
        try:
            return self._extract(normalized)
        except Exception as e:
            logger.warning("Feature extraction failed, using neutral-biased defaults: %s", e)
            return FeatureVector.fallback(self.weights)

    def _extract(self, normalized):
        w = self.weights
        lower = normalized.original.lower()
        scores = {POSITIVE: 0.0, NEGATIVE: 0.0, NEUTRAL: w.base_neutral}
        anchored = {POSITIVE: 0.0, NEGATIVE: 0.0}
        strong = {POSITIVE: False, NEGATIVE: False}
        matches = []

        # Strong indicators, resolved per token: a negated strong word
        # counts for the opposite class
        for token in normalized.tokens:
            if token.kind != WORD:
                continue
            word = token.text.lower()
            if word in self.lexicon.strong_positive:
                sentiment = POSITIVE
            elif word in self.lexicon.strong_negative:
                sentiment = NEGATIVE
            else:
                continue
            if NEGATED in token.flags:
                sentiment = NEGATIVE if sentiment == POSITIVE else POSITIVE
            strong[sentiment] = True
            anchored[sentiment] += w.strong_weight
            matches.append(('strong', sentiment, word))

        for sentiment in SENTIMENTS:
            weight = w.neutral_phrase_weight if sentiment == NEUTRAL else w.phrase_weight
            for phrase in self.phrases[sentiment]:
                if phrase in lower:
                    scores[sentiment] += weight
                    matches.append(('phrase', sentiment, phrase))

        for sentiment in (POSITIVE, NEGATIVE):
            for word, pattern, intensified in self.word_patterns[sentiment]:
                count = len(pattern.findall(lower))
                if not count:
                    continue
                word_score = count * w.word_weight
                if intensified is not None and intensified.search(lower):
                    word_score *= w.word_intensifier_factor
                scores[sentiment] += word_score
                matches.append(('word', sentiment, word))

        # Neutral words only count when no strong indicator was found
        if not strong[POSITIVE] and not strong[NEGATIVE]:
            for word, pattern, _ in self.word_patterns[NEUTRAL]:
                count = len(pattern.findall(lower))
                if count:
                    scores[NEUTRAL] += count * w.neutral_word_weight
                    matches.append(('word', NEUTRAL, word))

        markers = normalized.markers
        if markers & POSITIVE_MOODS:
            scores[POSITIVE] += w.emoji_weight
        if markers & NEGATIVE_MOODS:
            scores[NEGATIVE] += w.emoji_weight
        if markers & NEUTRAL_MOODS:
            scores[NEUTRAL] += w.emoji_weight
        if EXCITEMENT in markers:
            if scores[POSITIVE] + anchored[POSITIVE] > scores[NEGATIVE] + anchored[NEGATIVE]:
                scores[POSITIVE] += w.excitement_weight
            else:
                scores[NEGATIVE] += w.excitement_weight

        has_negation = normalized.has_negation
        self._apply_context_rules(lower, has_negation, scores, anchored, matches)

        return FeatureVector(
            positive_score=scores[POSITIVE],
            negative_score=scores[NEGATIVE],
            neutral_score=scores[NEUTRAL],
            anchored_positive=anchored[POSITIVE],
            anchored_negative=anchored[NEGATIVE],
            has_negation=has_negation,
            has_intensifier=normalized.has_intensifier,
            has_diminisher=normalized.has_diminisher,
            has_strong_positive=strong[POSITIVE],
            has_strong_negative=strong[NEGATIVE],
            matches=matches,
        )

    def _apply_context_rules(self, lower, has_negation, scores, anchored, matches):
        w = self.weights
        for triggers, sentiment, weight_name in CONTEXT_RULES:
            if any(trigger in lower for trigger in triggers):
                scores[sentiment] += getattr(w, weight_name)
                matches.append(('context', sentiment, triggers[0]))

        if any(trigger in lower for trigger in RECOMMENDATION_TRIGGERS):
            sentiment = NEGATIVE if has_negation else POSITIVE
            anchored[sentiment] += w.recommendation_weight
            matches.append(('context', sentiment, 'recommend'))

        if any(trigger in lower for trigger in SERVICE_TRIGGERS):
            anchor = lower.find('service')
            if anchor < 0:
                anchor = lower.find('support')
            window = lower[max(0, anchor - w.service_window):anchor + w.service_window]
            if any(word in window for word in SERVICE_POSITIVE):
                scores[POSITIVE] += w.service_weight
                matches.append(('context', POSITIVE, 'service'))
            elif any(word in window for word in SERVICE_NEGATIVE):
                scores[NEGATIVE] += w.service_weight
                matches.append(('context', NEGATIVE, 'service'))


class ScoreComposer:
    """Applies adjustment rules and normalizes to a ranked distribution.

    The floor is applied as an affine rescale of the normalized shares,
    ``floor + (1 - 3 * floor) * share``, to every class alike. Scores stay at
    or above the floor and sum to 1, and confidence is compressed towards 1/3
    by the same factor whether or not any class needed lifting.
    """

    def __init__(self, weights=None):
        self.weights = weights or ScoringWeights()

    def compose(self, features):
        try:
            return self._compose(features)
        except Exception as e:
            logger.warning("Score composition failed, using default distribution: %s", e)
            return SentimentScoreDistribution.default(self.weights)

    def _compose(self, features):
        w = self.weights
        positive = features.positive_score
        negative = features.negative_score
        neutral = features.neutral_score

        # Negation flips the lexicon signal once per text
        if features.has_negation:
            positive, negative = negative, positive
        positive += features.anchored_positive
        negative += features.anchored_negative

        if features.has_intensifier:
            if positive > negative:
                positive *= w.intensifier_factor
            else:
                negative *= w.intensifier_factor

        if features.has_diminisher:
            positive *= w.diminisher_factor
            negative *= w.diminisher_factor
            neutral *= w.diminisher_neutral_factor

        if features.has_strong_negative and not features.has_strong_positive:
            negative *= w.strong_override_factor
            neutral *= w.strong_neutral_factor
        elif features.has_strong_positive and not features.has_strong_negative:
            positive *= w.strong_override_factor
            neutral *= w.strong_neutral_factor

        raw = np.array([positive, negative, neutral], dtype=float)
        total = raw.sum()
        if not np.isfinite(total) or (raw < 0).any():
            raise ValueError(f"Invalid raw scores: {raw.tolist()}")
        if total == 0:
            return SentimentScoreDistribution.default(w)

        # Lift every class to the floor while keeping the sum at 1
        shares = w.score_floor + (1 - 3 * w.score_floor) * (raw / total)
        return SentimentScoreDistribution.from_scores(dict(zip(SENTIMENTS, shares.tolist())))


class SentimentEngine:
    """Lexicon-driven sentiment scoring and keyword extraction.

    Holds the read-only lexicon and weights; every call is independent, so a
    single engine can serve any number of texts in any order.
    """

    def __init__(self, lexicon=None, weights=None):
        self.lexicon = lexicon or DEFAULT_LEXICON
        self.weights = weights or ScoringWeights()
        self.normalizer = TextNormalizer(self.lexicon)
        self.extractor = FeatureExtractor(self.lexicon, self.weights)
        self.composer = ScoreComposer(self.weights)
        self.keyword_extractor = KeywordExtractor(self.lexicon, self.normalizer)

    def analyze_sentiment(self, text):
        """Score text, returning a SentimentScoreDistribution (never raises)"""
        normalized = self.normalizer.normalize(text)
        features = self.extractor.extract(normalized)
        return self.composer.compose(features)

    def extract_keywords(self, text, sentiment):
        return self.keyword_extractor.extract(text, sentiment)

    def classify(self, text):
        """Top sentiment, its confidence and the keywords for that sentiment"""
        distribution = self.analyze_sentiment(text)
        sentiment = distribution.sentiment
        return sentiment, distribution.confidence, self.extract_keywords(text, sentiment)

    def explain(self, text):
        """Intermediate results for display: tagged text, features and scores"""
        normalized = self.normalizer.normalize(text)
        features = self.extractor.extract(normalized)
        distribution = self.composer.compose(features)
        details = asdict(features)
        details.pop('matches')
        return {
            'tagged': normalized.tagged,
            'features': details,
            'matches': [
                {'type': kind, 'sentiment': sentiment, 'term': term}
                for kind, sentiment, term in features.matches
            ],
            'scores': distribution.as_dict(),
            'sentiment': distribution.sentiment,
            'confidence': distribution.confidence,
        }


if __name__ == "__main__":
    example_texts = sys.argv[1:] or [
        "I absolutely love this product! It exceeded all my expectations.",
        "Terrible experience. Worst customer service I have ever encountered.",
        "The product is okay. Nothing special but does what it says.",
        "Love it!",
        "Not the worst I have seen, but definitely not good enough.",
        "I would not recommend this to anyone :(",
        "Customer service was excellent, very helpful and polite. 😊",
    ]

    engine = SentimentEngine()

    print("\nSample predictions:")
    for text in example_texts:
        sentiment, confidence, keywords = engine.classify(text)
        print(f"Text: {text}")
        print(f"Sentiment: {sentiment} (confidence: {confidence:.2f})")
        print(f"Keywords: {', '.join(keywords) or '-'}\n")
