#!/usr/bin/env python3
# Text normalization: contractions, modifier tagging, punctuation and emoji markers

import logging
import re
from dataclasses import dataclass
from typing import NamedTuple

from nltk.tokenize import RegexpTokenizer

from sentiment_lexicon import DEFAULT_LEXICON

logger = logging.getLogger(__name__)

# Token kinds
WORD = 'word'
TRIGGER = 'trigger'
MARKER = 'marker'
PUNCT = 'punct'

# Modifier flags, in rendering order
NEGATED = 'NOT_'
INTENSIFIED = 'INTENSIFIER_'
DIMINISHED = 'DIMINISHER_'
MODIFIER_FLAGS = (NEGATED, INTENSIFIED, DIMINISHED)

# Mood markers
EXCITEMENT = 'EXCITEMENT'
CONFUSION = 'CONFUSION'
PAUSE = 'PAUSE'
POSITIVE_EMOJI = 'POSITIVE_EMOJI'
NEGATIVE_EMOJI = 'NEGATIVE_EMOJI'
NEUTRAL_EMOJI = 'NEUTRAL_EMOJI'
ANGER_EMOJI = 'ANGER_EMOJI'
LOVE_EMOJI = 'LOVE_EMOJI'
POSITIVE_EMOTICON = 'POSITIVE_EMOTICON'
NEGATIVE_EMOTICON = 'NEGATIVE_EMOTICON'
NEUTRAL_EMOTICON = 'NEUTRAL_EMOTICON'

# Applied in order; specific forms before the generic suffixes
CONTRACTIONS = [
    ("won't", "will not"),
    ("can't", "can not"),
    ("it's", "it is"),
    ("that's", "that is"),
    ("n't", " not"),
    ("'re", " are"),
    ("'ve", " have"),
    ("'ll", " will"),
    ("'d", " would"),
    ("'m", " am"),
]

EMOJI_MARKERS = {
    POSITIVE_EMOJI: ['😊', '😀', '😃', '😄', '😁', '🙂', '😌', '😍', '🥰', '😘', '🤗'],
    NEGATIVE_EMOJI: ['😢', '😭', '😞', '😔', '😟', '😕', '🙁', '☹️', '☹', '😰', '😨'],
    NEUTRAL_EMOJI: ['😐', '😑', '🤔', '😶', '🙄', '😏'],
    ANGER_EMOJI: ['😡', '😠', '🤬', '😤', '💢'],
    LOVE_EMOJI: ['❤️', '❤', '💕', '💖', '💗', '💝', '🧡', '💛', '💚', '💙', '💜'],
}

EMOTICON_MARKERS = {
    POSITIVE_EMOTICON: [':)', ':-)', ':]', ':D', ':-D', '=)', '=D'],
    NEGATIVE_EMOTICON: [':(', ':-(', ':[', '=(', 'D:'],
    NEUTRAL_EMOTICON: [':|', ':-|', '=|'],
}

GLYPH_MARKERS = {}
for _marker, _glyphs in list(EMOJI_MARKERS.items()) + list(EMOTICON_MARKERS.items()):
    for _glyph in _glyphs:
        GLYPH_MARKERS[_glyph] = _marker

# Bare suffixes only expand when attached to a word; none may run into a
# following word character ("O'Malley")
CONTRACTION_PATTERNS = [
    (re.compile((r'(?<=\w)' if contraction[0] in "n'" else r'\b') + re.escape(contraction)
                + r'(?!\w)', re.IGNORECASE), expansion)
    for contraction, expansion in CONTRACTIONS
]
EXCITEMENT_PATTERN = re.compile(r'!{2,}')
CONFUSION_PATTERN = re.compile(r'\?{2,}')
PAUSE_PATTERN = re.compile(r'\.{3,}')
WORD_PATTERN = re.compile(r"\w+(?:[-']\w+)*")

_glyph_alternatives = '|'.join(
    re.escape(glyph) for glyph in sorted(GLYPH_MARKERS, key=len, reverse=True)
)
TOKEN_PATTERN = (
    _glyph_alternatives
    + r"|!{2,}|\?{2,}|\.{3,}"
    + r"|\w+(?:[-']\w+)*"
    + r"|\S"
)


class Token(NamedTuple):
    text: str
    kind: str
    flags: frozenset = frozenset()
    marker: str = None


@dataclass(frozen=True)
class NormalizedText:
    """One input after normalization.

    ``tokens`` carries the annotations used for scoring; ``tagged`` is the
    same content rendered with inline markers for display.
    """
    original: str
    tagged: str
    tokens: tuple

    def has_flag(self, flag):
        return any(flag in token.flags for token in self.tokens)

    @property
    def has_negation(self):
        return self.has_flag(NEGATED)

    @property
    def has_intensifier(self):
        return self.has_flag(INTENSIFIED)

    @property
    def has_diminisher(self):
        return self.has_flag(DIMINISHED)

    @property
    def markers(self):
        return frozenset(token.marker for token in self.tokens if token.kind == MARKER)

    def words(self):
        """Lower-cased word tokens, trigger words excluded"""
        return [token.text.lower() for token in self.tokens if token.kind == WORD]


def _marker_for(piece):
    if piece in GLYPH_MARKERS:
        return GLYPH_MARKERS[piece]
    if EXCITEMENT_PATTERN.fullmatch(piece):
        return EXCITEMENT
    if CONFUSION_PATTERN.fullmatch(piece):
        return CONFUSION
    if PAUSE_PATTERN.fullmatch(piece):
        return PAUSE
    return None


def render_tagged(tokens, gaps):
    """Render tokens with inline markers (NOT_good, INTENSIFIER_love, EXCITEMENT)"""
    parts = []
    previous = None
    for token, gap in zip(tokens, gaps):
        prefix = ''.join(flag for flag in MODIFIER_FLAGS if flag in token.flags)
        if token.kind == TRIGGER:
            # The trigger itself becomes the prefix rendered on the next token
            body = prefix
        elif token.kind == MARKER:
            body = prefix + token.marker
        else:
            body = prefix + token.text

        if previous is None or previous.kind == TRIGGER:
            separator = ''
        elif gap or token.kind == MARKER or previous.kind == MARKER:
            separator = ' '
        else:
            separator = ''
        parts.append(separator + body)
        previous = token
    return ''.join(parts)


class TextNormalizer:
    """Turns raw text into a NormalizedText.

    Passes run in a fixed order: contraction expansion, negation tagging,
    intensifier tagging, diminisher tagging, then punctuation and emoji
    markers. A trigger word followed by whitespace flags the next token; a
    token already flagged by an earlier pass cannot act as a trigger in a
    later one.
    """

    def __init__(self, lexicon=DEFAULT_LEXICON):
        self.lexicon = lexicon
        self.tokenizer = RegexpTokenizer(TOKEN_PATTERN)
        self.passes = [
            (lexicon.negations, NEGATED),
            (lexicon.intensifiers, INTENSIFIED),
            (lexicon.diminishers, DIMINISHED),
        ]

    def expand_contractions(self, text):
        text = text.replace('’', "'")
        for pattern, expansion in CONTRACTION_PATTERNS:
            text = pattern.sub(expansion, text)
        return text

    def tokenize(self, text):
        """Split text into tokens, returning them with the whitespace gap before each"""
        tokens = []
        gaps = []
        last_end = 0
        for start, end in self.tokenizer.span_tokenize(text):
            piece = text[start:end]
            marker = _marker_for(piece)
            if marker is not None:
                tokens.append(Token(piece, MARKER, marker=marker))
            elif WORD_PATTERN.fullmatch(piece):
                tokens.append(Token(piece, WORD))
            else:
                tokens.append(Token(piece, PUNCT))
            gaps.append(text[last_end:start])
            last_end = end
        return tokens, gaps

    def _tag(self, tokens, gaps, triggers, flag):
        # Trigger eligibility is decided against the tokens as they were
        # before this pass
        eligible = [
            token.kind == WORD and not token.flags and token.text.lower() in triggers
            for token in tokens
        ]
        tagged = list(tokens)
        for i, is_trigger in enumerate(eligible):
            if not is_trigger or i + 1 >= len(tokens) or not gaps[i + 1]:
                continue
            tagged[i] = tagged[i]._replace(kind=TRIGGER, marker=flag)
            following = tagged[i + 1]
            tagged[i + 1] = following._replace(flags=following.flags | {flag})
        return tagged

    def normalize(self, text):
        original = text.strip() if isinstance(text, str) else ''
        try:
            expanded = self.expand_contractions(original)
            tokens, gaps = self.tokenize(expanded)
            for triggers, flag in self.passes:
                tokens = self._tag(tokens, gaps, triggers, flag)
            return NormalizedText(
                original=original,
                tagged=render_tagged(tokens, gaps),
                tokens=tuple(tokens),
            )
        except Exception as e:
            logger.warning("Text normalization failed, using original text: %s", e)
            return NormalizedText(
                original=original,
                tagged=original,
                tokens=tuple(Token(piece, WORD) for piece in original.split()),
            )
