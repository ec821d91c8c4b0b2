#!/usr/bin/env python3
# Keyword extraction driven by the sentiment lexicon

import logging

from nltk.tokenize import RegexpTokenizer

from sentiment_lexicon import DEFAULT_LEXICON, SENTIMENTS, STOPWORDS
from text_normalizer import MODIFIER_FLAGS, TextNormalizer

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 8
MIN_KEYWORD_LENGTH = 3
CONTEXT_WINDOW = 2

MARKER_PREFIXES = tuple(flag.lower() for flag in MODIFIER_FLAGS)


def strip_markers(token):
    """Remove any leftover marker prefix such as ``not_``"""
    stripped = True
    while stripped:
        stripped = False
        for prefix in MARKER_PREFIXES:
            if token.startswith(prefix):
                token = token[len(prefix):]
                stripped = True
    return token


class KeywordExtractor:
    """Picks the most salient tokens of a text for display.

    A token survives if it is a strong sentiment word, belongs to the
    vocabulary of the requested sentiment, is longer than four characters, or
    sits within two tokens of any lexicon word. Survivors are ranked by
    lexicon membership, frequency and length.
    """

    def __init__(self, lexicon=DEFAULT_LEXICON, normalizer=None, stopwords=STOPWORDS,
                 max_keywords=MAX_KEYWORDS):
        self.lexicon = lexicon
        self.normalizer = normalizer or TextNormalizer(lexicon)
        self.stopwords = stopwords
        self.max_keywords = max_keywords
        self.tokenizer = RegexpTokenizer(r'\w+')
        self.vocabulary = {sentiment: lexicon.class_vocabulary(sentiment) for sentiment in SENTIMENTS}
        self.any_vocabulary = frozenset().union(*self.vocabulary.values())

    def tokenize(self, text):
        normalized = self.normalizer.normalize(text)
        joined = ' '.join(normalized.words())
        return [
            word for word in self.tokenizer.tokenize(joined.lower())
            if len(word) >= MIN_KEYWORD_LENGTH
        ]

    def extract(self, text, sentiment):
        try:
            return self._extract(text, sentiment)
        except Exception as e:
            logger.warning("Keyword extraction failed: %s", e)
            return []

    def _extract(self, text, sentiment):
        words = self.tokenize(text)
        class_vocabulary = self.vocabulary.get(sentiment, frozenset())

        candidates = []
        seen = set()
        for index, word in enumerate(words):
            if word in seen or word in self.stopwords or word.endswith('_'):
                continue
            if self._is_relevant(word, index, words, class_vocabulary):
                seen.add(word)
                candidates.append(word)

        scored = [(self._score(word, words, class_vocabulary), word) for word in candidates]
        # Stable sort keeps first-appearance order among equal scores
        scored.sort(key=lambda item: -item[0])

        keywords = []
        for _, word in scored:
            word = strip_markers(word)
            if len(word) < MIN_KEYWORD_LENGTH or word in self.stopwords or word in keywords:
                continue
            keywords.append(word)
            if len(keywords) == self.max_keywords:
                break
        return keywords

    def _is_relevant(self, word, index, words, class_vocabulary):
        if self.lexicon.is_strong(word):
            return True
        if word in class_vocabulary:
            return True
        if len(word) > 4:
            return True
        context = words[max(0, index - CONTEXT_WINDOW):index + CONTEXT_WINDOW + 1]
        return any(other in self.any_vocabulary for other in context)

    def _score(self, word, words, class_vocabulary):
        score = 0.0
        if self.lexicon.is_strong(word):
            score += 5
        if word in class_vocabulary:
            score += 3
        score += words.count(word)
        score += min(len(word) / 10, 1)
        if self.lexicon.in_any_table(word):
            score += 2
        return score
