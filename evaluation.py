#!/usr/bin/env python3
# Accuracy testing against labelled sample texts

from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, classification_report

from sentiment_lexicon import NEGATIVE, NEUTRAL, POSITIVE, SENTIMENTS

SPECIFIED_SOURCE = 'Specified Test Data'


@dataclass(frozen=True)
class TestDataEntry:
    __test__ = False

    id: str
    text: str
    expected_sentiment: str
    category: str = 'general'
    difficulty: str = 'easy'
    source: str = SPECIFIED_SOURCE


_SAMPLES = [
    ("The product is absolutely amazing! I love it so much.", POSITIVE, 'product_review', 'easy'),
    ("This movie was a complete waste of time, truly disappointing.", NEGATIVE, 'entertainment', 'easy'),
    ("The weather today is neither good nor bad, just average.", NEUTRAL, 'general', 'medium'),
    ("Customer service was excellent, very helpful and polite.", POSITIVE, 'service_review', 'easy'),
    ("I'm quite frustrated with the constant bugs in this software.", NEGATIVE, 'product_review', 'medium'),
    ("Received the package quickly and it was exactly as described.", NEUTRAL, 'service_review', 'medium'),
    ("The new policy seems to have a mix of pros and cons.", NEUTRAL, 'general', 'medium'),
    ("I couldn't believe how rude the staff was, utterly unacceptable.", NEGATIVE, 'service_review', 'easy'),
    ("Enjoyed the concert thoroughly, the band was incredible!", POSITIVE, 'entertainment', 'easy'),
    ("The instructions were unclear, making assembly very difficult.", NEGATIVE, 'product_review', 'medium'),
    ("It's okay, nothing special, just does the job.", NEUTRAL, 'product_review', 'easy'),
    ("What a delightful surprise! Highly recommend.", POSITIVE, 'general', 'easy'),
    ("Feeling utterly miserable after that experience.", NEGATIVE, 'general', 'medium'),
    ("The presentation was informative and well-structured.", POSITIVE, 'general', 'easy'),
    ("Indifferent about the outcome; it didn't really affect me.", NEUTRAL, 'general', 'medium'),
    ("This coffee tastes like burnt tires, truly awful.", NEGATIVE, 'product_review', 'easy'),
    ("So happy with my purchase, exceeded all expectations.", POSITIVE, 'product_review', 'easy'),
    ("There were some minor issues, but nothing major.", NEUTRAL, 'general', 'medium'),
    ("My internet connection is consistently terrible these days.", NEGATIVE, 'service_review', 'easy'),
    ("A perfectly adequate solution for basic needs.", NEUTRAL, 'product_review', 'medium'),
    ("The food was good, but the service was slow.", NEUTRAL, 'service_review', 'hard'),
    ("I am beyond ecstatic about this new feature!", POSITIVE, 'product_review', 'easy'),
    ("Absolutely fuming about the delayed flight.", NEGATIVE, 'service_review', 'easy'),
    ("Worst customer experience ever, will never return.", NEGATIVE, 'service_review', 'easy'),
    ("Fantastic value for money, a definite must-buy.", POSITIVE, 'product_review', 'easy'),
    ("Their response was neither here nor there.", NEUTRAL, 'general', 'medium'),
    ("It could be better, honestly.", NEUTRAL, 'general', 'medium'),
    ("Average quality, nothing to write home about.", NEUTRAL, 'product_review', 'medium'),
    ("Such a letdown, completely failed to deliver.", NEGATIVE, 'general', 'easy'),
    ("Brilliant! Simply brilliant!", POSITIVE, 'entertainment', 'easy'),
]

SAMPLE_TEST_DATA = tuple(
    TestDataEntry(f'test_{index}', text, expected, category, difficulty)
    for index, (text, expected, category, difficulty) in enumerate(_SAMPLES, start=1)
)


def filter_entries(entries=SAMPLE_TEST_DATA, category=None, difficulty=None, source=None):
    return [
        entry for entry in entries
        if (category is None or entry.category == category)
        and (difficulty is None or entry.difficulty == difficulty)
        and (source is None or entry.source == source)
    ]


def random_sample(count=5, seed=None, entries=SAMPLE_TEST_DATA):
    rng = np.random.default_rng(seed)
    order = rng.permutation(len(entries))
    return [entries[i] for i in order[:count]]


def balanced_sample(count=15, seed=None, entries=SAMPLE_TEST_DATA):
    """Equal numbers of positive, negative and neutral entries, shuffled"""
    per_sentiment = count // len(SENTIMENTS)
    picked = []
    for sentiment in SENTIMENTS:
        picked.extend([e for e in entries if e.expected_sentiment == sentiment][:per_sentiment])
    rng = np.random.default_rng(seed)
    return [picked[i] for i in rng.permutation(len(picked))]


def dataset_stats(entries=SAMPLE_TEST_DATA):
    df = pd.DataFrame([asdict(entry) for entry in entries])
    return {
        'total': len(df),
        'bySentiment': df['expected_sentiment'].value_counts().to_dict(),
        'byCategory': df['category'].value_counts().to_dict(),
        'byDifficulty': df['difficulty'].value_counts().to_dict(),
    }


@dataclass(frozen=True)
class EvaluationReport:
    accuracy: float
    by_sentiment: dict
    by_difficulty: dict
    outcomes: list
    report: dict


def evaluate(engine, entries=SAMPLE_TEST_DATA):
    """Score every entry with ``engine`` and compare against the expected labels"""
    if not entries:
        raise ValueError('No test entries to evaluate')

    rows = []
    for entry in entries:
        distribution = engine.analyze_sentiment(entry.text)
        rows.append({
            'id': entry.id,
            'text': entry.text,
            'expected': entry.expected_sentiment,
            'predicted': distribution.sentiment,
            'confidence': distribution.confidence,
            'difficulty': entry.difficulty,
        })
    df = pd.DataFrame(rows)
    df['correct'] = df['expected'] == df['predicted']

    def _grouped(column):
        stats = df.groupby(column)['correct'].agg(['sum', 'count'])
        return {
            str(name): {
                'correct': int(row['sum']),
                'total': int(row['count']),
                'accuracy': float(row['sum'] / row['count']),
            }
            for name, row in stats.iterrows()
        }

    return EvaluationReport(
        accuracy=float(accuracy_score(df['expected'], df['predicted'])),
        by_sentiment=_grouped('expected'),
        by_difficulty=_grouped('difficulty'),
        outcomes=df.to_dict('records'),
        report=classification_report(
            df['expected'], df['predicted'], labels=list(SENTIMENTS),
            output_dict=True, zero_division=0,
        ),
    )


if __name__ == "__main__":
    from sentiment_analysis import SentimentEngine

    result = evaluate(SentimentEngine())
    print(f"Accuracy: {result.accuracy:.3f}")
    print('\nAccuracy by sentiment:')
    for name, stats in result.by_sentiment.items():
        print(f"  {name}: {stats['correct']}/{stats['total']} ({stats['accuracy']:.0%})")
    print('\nAccuracy by difficulty:')
    for name, stats in result.by_difficulty.items():
        print(f"  {name}: {stats['correct']}/{stats['total']} ({stats['accuracy']:.0%})")
