#!/usr/bin/env python3
# Sentiment lexicon tables

from dataclasses import dataclass

POSITIVE = 'positive'
NEGATIVE = 'negative'
NEUTRAL = 'neutral'

SENTIMENTS = (POSITIVE, NEGATIVE, NEUTRAL)

POSITIVE_PHRASES = [
    'love this', 'absolutely amazing', 'fantastic experience', 'highly recommend',
    'exceeded expectations', 'brilliant service', 'outstanding quality', 'perfect solution',
    'incredibly helpful', 'wonderful experience', 'great value', 'excellent customer service',
    'top notch', 'five stars', 'best ever', 'amazing quality', 'superb performance',
    'delighted with', 'thrilled about', 'impressed by', 'satisfied with results',
    'works perfectly', 'exactly what needed', 'beyond expectations', 'remarkable improvement',
    'money well spent', 'worth every penny', 'highly satisfied', 'would buy again'
]

POSITIVE_WORDS = [
    'excellent', 'amazing', 'wonderful', 'fantastic', 'perfect', 'outstanding',
    'brilliant', 'superb', 'magnificent', 'delightful', 'awesome', 'great',
    'good', 'love', 'like', 'enjoy', 'happy', 'pleased', 'satisfied',
    'impressive', 'remarkable', 'exceptional', 'marvelous', 'terrific',
    'beautiful', 'stunning', 'incredible', 'phenomenal', 'spectacular',
    'flawless', 'superior', 'premium', 'quality', 'valuable', 'helpful',
    'efficient', 'reliable', 'trustworthy', 'professional', 'friendly',
    'recommend', 'thrilled', 'delighted', 'impressed'
]

NEGATIVE_PHRASES = [
    'terrible experience', 'worst ever', 'complete waste', 'total disaster',
    'absolutely awful', 'horrible service', 'disappointing quality', 'poor performance',
    'not recommended', 'avoid at all costs', 'money wasted', 'regret buying',
    'broken promises', 'failed expectations', 'useless product', 'terrible support',
    'nightmare experience', 'completely unsatisfied', 'major problems', 'serious issues',
    'does not work', 'falling apart', 'cheap quality', 'overpriced junk',
    'waste of money', 'total failure', 'extremely disappointed', 'never again'
]

NEGATIVE_WORDS = [
    'terrible', 'awful', 'horrible', 'disgusting', 'disappointing', 'pathetic',
    'atrocious', 'dreadful', 'appalling', 'abysmal', 'bad', 'hate', 'dislike',
    'annoying', 'frustrating', 'useless', 'worthless', 'poor', 'worst',
    'unacceptable', 'inadequate', 'inferior', 'defective', 'faulty',
    'broken', 'damaged', 'unreliable', 'unprofessional', 'rude', 'slow',
    'expensive', 'overpriced', 'cheap', 'flimsy', 'fragile', 'uncomfortable',
    'disappointed', 'regret', 'waste', 'failed', 'disaster', 'nightmare'
]

NEUTRAL_PHRASES = [
    'it is okay', 'average quality', 'nothing special', 'as expected',
    'standard service', 'typical experience', 'meets requirements', 'basic functionality',
    'normal performance', 'adequate solution', 'fair price', 'reasonable option',
    'could be better', 'room for improvement', 'mixed feelings', 'pros and cons',
    'neither good nor bad', 'middle of the road', 'so so', 'not bad not great'
]

NEUTRAL_WORDS = [
    'okay', 'average', 'normal', 'standard', 'typical', 'regular',
    'ordinary', 'common', 'usual', 'basic', 'moderate', 'fair',
    'adequate', 'acceptable', 'reasonable', 'decent', 'sufficient',
    'mediocre', 'mixed', 'neutral', 'balanced', 'expected',
    'fine', 'alright', 'so-so', 'middle'
]

# Words that should never leave a text classified as neutral
STRONG_POSITIVE = [
    'love', 'excellent', 'amazing', 'wonderful', 'fantastic', 'perfect',
    'outstanding', 'brilliant', 'superb', 'magnificent', 'awesome',
    'incredible', 'phenomenal', 'spectacular', 'flawless', 'exceptional'
]

STRONG_NEGATIVE = [
    'hate', 'terrible', 'awful', 'horrible', 'disgusting', 'pathetic',
    'atrocious', 'dreadful', 'appalling', 'abysmal', 'worst', 'useless',
    'worthless', 'unacceptable', 'disaster', 'nightmare', 'regret',
    'waste', 'failed', 'broken', 'damaged', 'defective', 'faulty'
]

NEGATIONS = [
    'not', 'no', 'never', 'nothing', 'nowhere', 'nobody', 'none', 'neither', 'nor'
]

INTENSIFIERS = [
    'very', 'extremely', 'incredibly', 'absolutely', 'totally', 'completely',
    'truly', 'really', 'quite', 'beyond', 'thoroughly', 'simply', 'utterly',
    'consistently'
]

# "quite" is also an intensifier; the intensifier pass claims it first
DIMINISHERS = [
    'slightly', 'somewhat', 'rather', 'quite', 'fairly', 'pretty'
]

STOPWORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with',
    'by', 'this', 'that', 'these', 'those', 'i', 'you', 'he', 'she', 'it', 'we', 'they',
    'am', 'is', 'are', 'was', 'were', 'be', 'been', 'being', 'have', 'has', 'had',
    'do', 'does', 'did', 'will', 'would', 'could', 'should', 'may', 'might', 'must',
    'can', 'shall', 'not_', 'intensifier_', 'diminisher_'
])


@dataclass(frozen=True)
class LexiconSet:
    """Read-only word and phrase tables shared by every analysis call.

    All entries are lower-cased. ``phrases`` and ``words`` map each sentiment
    class to a frozenset; the modifier and strong-indicator lists are shared.
    """
    phrases: dict
    words: dict
    intensifiers: frozenset
    diminishers: frozenset
    negations: frozenset
    strong_positive: frozenset
    strong_negative: frozenset

    def class_vocabulary(self, sentiment):
        """Single words usable as keywords for one class (lexicon words plus phrase words)"""
        vocabulary = set(self.words.get(sentiment, ()))
        for phrase in self.phrases.get(sentiment, ()):
            vocabulary.update(phrase.split())
        return frozenset(word for word in vocabulary if len(word) > 2)

    def is_strong(self, word):
        return word in self.strong_positive or word in self.strong_negative

    def in_any_table(self, word):
        """True when ``word`` is a lexicon word or a word of any phrase"""
        for sentiment in SENTIMENTS:
            if word in self.words[sentiment]:
                return True
            if any(word in phrase.split() for phrase in self.phrases[sentiment]):
                return True
        return False


def _lowered(entries):
    return frozenset(entry.strip().lower() for entry in entries if entry and entry.strip())


def build_lexicon(positive_phrases=POSITIVE_PHRASES, positive_words=POSITIVE_WORDS,
                  negative_phrases=NEGATIVE_PHRASES, negative_words=NEGATIVE_WORDS,
                  neutral_phrases=NEUTRAL_PHRASES, neutral_words=NEUTRAL_WORDS,
                  intensifiers=INTENSIFIERS, diminishers=DIMINISHERS, negations=NEGATIONS,
                  strong_positive=STRONG_POSITIVE, strong_negative=STRONG_NEGATIVE):
    """Build a LexiconSet, lower-casing every entry"""
    strong_pos = _lowered(strong_positive)
    strong_neg = _lowered(strong_negative)
    overlap = strong_pos & strong_neg
    if overlap:
        raise ValueError(f"Words listed as both strong positive and strong negative: {sorted(overlap)}")

    return LexiconSet(
        phrases={
            POSITIVE: _lowered(positive_phrases),
            NEGATIVE: _lowered(negative_phrases),
            NEUTRAL: _lowered(neutral_phrases),
        },
        words={
            POSITIVE: _lowered(positive_words),
            NEGATIVE: _lowered(negative_words),
            NEUTRAL: _lowered(neutral_words),
        },
        intensifiers=_lowered(intensifiers),
        diminishers=_lowered(diminishers),
        negations=_lowered(negations),
        strong_positive=strong_pos,
        strong_negative=strong_neg,
    )


DEFAULT_LEXICON = build_lexicon()
