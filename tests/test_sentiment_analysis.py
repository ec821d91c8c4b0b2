from concurrent.futures import ThreadPoolExecutor

import pytest

from sentiment_analysis import (
    LABELS, FeatureVector, LabelScore, ScoreComposer, ScoringWeights, SentimentEngine,
    SentimentScoreDistribution, label_to_sentiment,
)
from sentiment_lexicon import DEFAULT_LEXICON, NEGATIVE, NEUTRAL, POSITIVE, STRONG_POSITIVE

ODD_INPUTS = [
    "",
    None,
    "???",
    "!!!!!!",
    "😊😢😐",
    "Café ünïcödé 中文 テスト",
    "not not not",
    "a" * 10000,
    "The product is okay. Nothing special but does what it says.",
    "I hate it but I love it",
]

FILLERS = [
    "We went to the store on Tuesday. It was {word}. Then we drove home.",
    "The product is okay. Nothing special but does what it says. {word}.",
    "{word}",
]


class ExplodingLexicon:
    """Behaves like the default lexicon until the strong words are read"""

    def __getattr__(self, name):
        if name == 'strong_positive':
            raise RuntimeError("lexicon unavailable")
        return getattr(DEFAULT_LEXICON, name)


def assert_valid(distribution, floor=0.05):
    assert len(distribution) == 3
    assert {item.label for item in distribution} == set(LABELS.values())
    assert sum(item.score for item in distribution) == pytest.approx(1.0, abs=1e-6)
    assert all(floor - 1e-9 <= item.score <= 1 for item in distribution)
    scores = [item.score for item in distribution]
    assert scores == sorted(scores, reverse=True)


def test_absolute_love_is_positive(engine):
    distribution = engine.analyze_sentiment(
        "I absolutely love this product! It exceeded all my expectations.")

    assert distribution.sentiment == POSITIVE
    assert distribution.top.label == 'LABEL_2'
    assert distribution.confidence > 0.5


def test_terrible_experience_is_negative(engine):
    distribution = engine.analyze_sentiment(
        "Terrible experience. Worst customer service I have ever encountered.")

    assert distribution.sentiment == NEGATIVE
    assert distribution.top.label == 'LABEL_0'
    assert distribution.confidence > 0.5


def test_okay_product_is_neutral(engine):
    distribution = engine.analyze_sentiment(
        "The product is okay. Nothing special but does what it says.")

    assert distribution.sentiment == NEUTRAL
    assert distribution.top.label == 'LABEL_1'


def test_love_it(engine):
    assert engine.analyze_sentiment("Love it!").sentiment == POSITIVE
    assert "love" in engine.extract_keywords("Love it!", POSITIVE)


def test_negations_flip_once(engine):
    distribution = engine.analyze_sentiment(
        "Not the worst I have seen, but definitely not good enough.")

    assert distribution.sentiment == NEGATIVE


@pytest.mark.parametrize("text", ODD_INPUTS)
def test_distribution_is_valid_for_any_input(engine, text):
    assert_valid(engine.analyze_sentiment(text))


def test_deterministic(engine):
    text = "Customer service was excellent, very helpful and polite. 😊"

    assert engine.analyze_sentiment(text) == engine.analyze_sentiment(text)


@pytest.mark.parametrize("word", STRONG_POSITIVE)
@pytest.mark.parametrize("filler", FILLERS)
def test_strong_positive_word_dominates(engine, word, filler):
    assert engine.analyze_sentiment(filler.format(word=word)).sentiment == POSITIVE


@pytest.mark.parametrize("word", ['love', 'like'])
def test_negation_inverts(engine, word):
    plain = engine.analyze_sentiment(f"I {word} this")
    negated = engine.analyze_sentiment(f"I do not {word} this")

    assert plain.sentiment == POSITIVE
    assert negated.sentiment == NEGATIVE


def test_failing_lexicon_falls_back():
    engine = SentimentEngine(lexicon=ExplodingLexicon())
    distribution = engine.analyze_sentiment("I love this")

    assert_valid(distribution)
    assert distribution.sentiment == NEUTRAL


def test_broken_tables_fall_back():
    engine = SentimentEngine()
    engine.extractor.phrases = None

    features = engine.extractor.extract(engine.normalizer.normalize("Great product"))
    assert features == FeatureVector(0.3, 0.3, 0.4)
    assert engine.analyze_sentiment("Great product").sentiment == NEUTRAL


def test_many_callers_get_independent_results(engine):
    texts = [
        "I absolutely love this product!",
        "Terrible experience.",
        "The product is okay.",
        "I would not recommend this",
    ] * 10
    expected = [engine.analyze_sentiment(text) for text in texts]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(engine.analyze_sentiment, texts))

    assert results == expected


class TestScoreComposer:

    def test_nan_uses_default(self):
        distribution = ScoreComposer().compose(FeatureVector(float('nan'), 0.0, 0.0))

        assert distribution.as_dict() == pytest.approx(
            {POSITIVE: 0.25, NEGATIVE: 0.15, NEUTRAL: 0.6})
        assert [item.label for item in distribution] == ['LABEL_1', 'LABEL_2', 'LABEL_0']

    def test_zero_scores_use_default(self):
        distribution = ScoreComposer().compose(FeatureVector(0.0, 0.0, 0.0))

        assert distribution.sentiment == NEUTRAL
        assert distribution.confidence == pytest.approx(0.6)

    def test_ties_rank_positive_then_negative_then_neutral(self):
        distribution = ScoreComposer().compose(FeatureVector(1.0, 1.0, 1.0))

        assert [item.label for item in distribution] == ['LABEL_2', 'LABEL_0', 'LABEL_1']
        assert all(item.score == pytest.approx(1 / 3) for item in distribution)

    def test_negation_swaps_lexicon_scores(self):
        composer = ScoreComposer()

        assert composer.compose(FeatureVector(1.0, 0.0, 0.3)).sentiment == POSITIVE
        assert composer.compose(
            FeatureVector(1.0, 0.0, 0.3, has_negation=True)).sentiment == NEGATIVE

    def test_anchored_scores_survive_negation(self):
        features = FeatureVector(0.0, 0.0, 0.3, anchored_positive=1.0, has_negation=True)

        assert ScoreComposer().compose(features).sentiment == POSITIVE

    def test_intensifier_amplifies_leader(self):
        plain = ScoreComposer().compose(FeatureVector(0.5, 0.0, 0.5))
        intensified = ScoreComposer().compose(FeatureVector(0.5, 0.0, 0.5, has_intensifier=True))

        assert [item.label for item in plain] == ['LABEL_2', 'LABEL_1', 'LABEL_0']
        assert intensified.as_dict()[POSITIVE] == pytest.approx(0.05 + 0.85 * 0.7 / 1.2)

    def test_diminisher_favours_neutral(self):
        composer = ScoreComposer()

        assert composer.compose(FeatureVector(0.4, 0.0, 0.3)).sentiment == POSITIVE
        assert composer.compose(
            FeatureVector(0.4, 0.0, 0.3, has_diminisher=True)).sentiment == NEUTRAL

    def test_one_sided_strong_override(self):
        distribution = ScoreComposer().compose(
            FeatureVector(1.0, 0.5, 0.3, has_strong_positive=True))

        assert distribution.as_dict()[NEUTRAL] == pytest.approx(0.05 + 0.85 * 0.09 / 2.59)

    def test_conflicting_strong_words_skip_override(self):
        distribution = ScoreComposer().compose(
            FeatureVector(1.0, 0.5, 0.3, has_strong_positive=True, has_strong_negative=True))

        assert distribution.as_dict()[NEUTRAL] == pytest.approx(0.05 + 0.85 * 0.3 / 1.8)

    def test_floor_rescales_every_class(self):
        distribution = ScoreComposer().compose(FeatureVector(0.6, 0.2, 0.2))

        assert distribution.as_dict() == pytest.approx({
            POSITIVE: 0.05 + 0.85 * 0.6,
            NEGATIVE: 0.05 + 0.85 * 0.2,
            NEUTRAL: 0.05 + 0.85 * 0.2,
        })

    def test_zero_floor(self):
        composer = ScoreComposer(ScoringWeights(score_floor=0.0))
        distribution = composer.compose(FeatureVector(1.0, 0.0, 0.0))

        assert distribution.as_dict() == {POSITIVE: 1.0, NEGATIVE: 0.0, NEUTRAL: 0.0}


class TestFeatureExtractor:

    def features(self, engine, text):
        return engine.extractor.extract(engine.normalizer.normalize(text))

    def test_emoji(self, engine):
        assert self.features(engine, "The delivery arrived 😊").positive_score == pytest.approx(0.6)

    def test_excitement_goes_to_leader(self, engine):
        assert self.features(engine, "Good job!!").positive_score == pytest.approx(0.8)

    def test_word_weight_and_intensifier(self, engine):
        assert self.features(engine, "It was terrible").negative_score == pytest.approx(0.4)
        assert self.features(
            engine, "It was absolutely terrible").negative_score == pytest.approx(0.6)

    def test_strong_word_is_anchored(self, engine):
        features = self.features(engine, "It was terrible")

        assert features.anchored_negative == pytest.approx(1.0)
        assert features.has_strong_negative
        assert ('strong', NEGATIVE, 'terrible') in features.matches

    def test_negated_strong_word_counts_for_opposite_class(self, engine):
        features = self.features(engine, "It was not awful")

        assert features.has_strong_positive
        assert not features.has_strong_negative
        assert features.anchored_positive == pytest.approx(1.0)

    def test_negated_recommendation(self, engine):
        features = self.features(engine, "I would not recommend this")

        assert features.anchored_negative == pytest.approx(0.5)
        assert features.positive_score == pytest.approx(0.4)
        assert engine.analyze_sentiment("I would not recommend this").sentiment == NEGATIVE

    def test_service_context(self, engine):
        features = self.features(engine, "Excellent customer service from the team")

        assert ('context', POSITIVE, 'service') in features.matches
        assert ('phrase', POSITIVE, 'excellent customer service') in features.matches

    def test_comparison(self, engine):
        features = self.features(engine, "This is better than the old one")

        assert features.positive_score == pytest.approx(0.3)

    def test_strong_word_suppresses_neutral_words(self, engine):
        assert self.features(engine, "The food was okay").neutral_score == pytest.approx(0.6)
        assert self.features(
            engine, "The food was okay but terrible").neutral_score == pytest.approx(0.3)


class TestScoringWeights:

    def test_phrase_must_outweigh_word(self):
        with pytest.raises(ValueError):
            ScoringWeights(phrase_weight=0.3)

    def test_floor_bounds(self):
        with pytest.raises(ValueError):
            ScoringWeights(score_floor=0.4)

    def test_default_distribution_sums_to_one(self):
        with pytest.raises(ValueError):
            ScoringWeights(default_distribution=(0.5, 0.5, 0.5))

    def test_replace(self):
        weights = ScoringWeights()
        changed = weights.replace(score_floor=0.1)

        assert changed.score_floor == 0.1
        assert weights.score_floor == 0.05

    def test_custom_floor_is_honoured(self):
        engine = SentimentEngine(weights=ScoringWeights(score_floor=0.1))

        assert_valid(engine.analyze_sentiment("Love it!"), floor=0.1)


def test_labels():
    assert label_to_sentiment('LABEL_0') == NEGATIVE
    assert label_to_sentiment('LABEL_1') == NEUTRAL
    assert label_to_sentiment('LABEL_2') == POSITIVE
    assert label_to_sentiment('LABEL_9') == NEUTRAL
    assert LabelScore('LABEL_2', 0.7).sentiment == POSITIVE


def test_distribution_serialization():
    distribution = SentimentScoreDistribution.from_scores(
        {POSITIVE: 0.2, NEGATIVE: 0.7, NEUTRAL: 0.1})

    assert distribution.to_list() == [
        {'label': 'LABEL_0', 'score': 0.7},
        {'label': 'LABEL_2', 'score': 0.2},
        {'label': 'LABEL_1', 'score': 0.1},
    ]


def test_classify(engine):
    sentiment, confidence, keywords = engine.classify("Love it!")

    assert sentiment == POSITIVE
    assert 0.5 < confidence <= 1
    assert keywords == ["love"]


def test_explain(engine):
    details = engine.explain("I don't like it")

    assert set(details) == {'tagged', 'features', 'matches', 'scores', 'sentiment', 'confidence'}
    assert details['tagged'] == "I do NOT_like it"
    assert details['features']['has_negation'] is True
    assert {'type': 'word', 'sentiment': POSITIVE, 'term': 'like'} in details['matches']
    assert details['sentiment'] == NEGATIVE
