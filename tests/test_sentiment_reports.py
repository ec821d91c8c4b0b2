import io
import json
from datetime import date, datetime, timedelta, timezone

import pandas as pd
import pytest

from sentiment_lexicon import NEGATIVE, NEUTRAL, POSITIVE
from sentiment_reports import (
    BATCH_ANALYSIS, DIRECT_INPUT, EXPORTERS, FALLBACK_ANALYSIS, MAX_BATCH_SIZE,
    InputValidationError, SentimentResult, UploadError, analyze_batch, analyze_text,
    compare, export_filename, parse_upload, summarize, to_csv, to_json, to_pdf, to_text_report,
    validate_text,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class StubEngine:
    """Returns canned classifications keyed by text"""

    def __init__(self, answers=None):
        self.answers = answers or {}

    def classify(self, text):
        return self.answers.get(text, (NEUTRAL, 0.5, []))


class FailingEngine:
    def classify(self, text):
        raise RuntimeError("engine unavailable")


def make_result(text, sentiment=POSITIVE, confidence=0.9, keywords=(), timestamp=NOW,
                source=DIRECT_INPUT):
    return SentimentResult(f'id-{text}', text, sentiment, confidence, tuple(keywords),
                           timestamp, source)


@pytest.mark.parametrize("text, message", [
    ("", 'Text cannot be empty'),
    ("   ", 'Text cannot be empty'),
    (None, 'Text cannot be empty'),
    ("x" * 10001, 'Text is too long. Maximum 10000 characters allowed'),
    (" ab ", 'Text must be at least 3 characters long'),
])
def test_validate_text_rejects(text, message):
    assert validate_text(text) == message


def test_validate_text_accepts():
    assert validate_text("abc") is None
    assert validate_text("x" * 10000) is None


def test_analyze_text(engine):
    result = analyze_text(engine, "  Love it!  ", now=NOW)

    assert result.text == "Love it!"
    assert result.sentiment == POSITIVE
    assert result.keywords == ('love',)
    assert result.timestamp == NOW
    assert result.source == DIRECT_INPUT
    assert result.to_dict()['timestamp'] == '2026-10-17T12:00:00+00:00'


def test_analyze_text_validates(engine):
    with pytest.raises(InputValidationError, match='at least 3 characters'):
        analyze_text(engine, "hi")


def test_analyze_text_falls_back_when_engine_fails():
    result = analyze_text(FailingEngine(), "Love it!", now=NOW)

    assert result.sentiment == NEUTRAL
    assert result.confidence == 0.5
    assert result.keywords == ()
    assert result.source == FALLBACK_ANALYSIS


def test_analyze_batch(engine):
    batch = analyze_batch(engine, ["Love it!", "", "Terrible experience.", "ok"], now=NOW)

    assert [result.text for result in batch.results] == ["Love it!", "Terrible experience."]
    assert [result.source for result in batch.results] == [BATCH_ANALYSIS] * 2
    assert batch.skipped == (
        'Item 2: Text cannot be empty',
        'Item 4: Text must be at least 3 characters long',
    )
    assert batch.summary['total'] == 2
    assert batch.summary[POSITIVE] == 1
    assert batch.summary[NEGATIVE] == 1
    assert batch.to_dict()['skipped'] == list(batch.skipped)


@pytest.mark.parametrize("texts, message", [
    ([], 'requires a list of texts'),
    ("Love it!", 'requires a list of texts'),
    (["Love it!"] * (MAX_BATCH_SIZE + 1), 'Batch size too large'),
    (["", "  "], 'No valid texts found'),
])
def test_analyze_batch_rejects(engine, texts, message):
    with pytest.raises(InputValidationError, match=message):
        analyze_batch(engine, texts)


def test_summarize():
    summary = summarize([
        make_result("one", POSITIVE, 0.9),
        make_result("two", POSITIVE, 0.7),
        make_result("three", NEUTRAL, 0.5),
    ])

    assert summary == {
        'total': 3, POSITIVE: 2, NEGATIVE: 0, NEUTRAL: 1,
        'averageConfidence': pytest.approx(0.7),
    }
    assert summarize([])['averageConfidence'] == 0.0


class TestCompare:

    def test_by_source(self):
        results = [
            make_result("first", POSITIVE, 0.9, ['good'], source=DIRECT_INPUT),
            make_result("second", NEGATIVE, 0.7, ['bad'], source=BATCH_ANALYSIS),
            make_result("third", POSITIVE, 0.5, ['good', 'nice'], source=DIRECT_INPUT),
        ]
        groups = compare(results, by='source')

        assert [group.name for group in groups] == [DIRECT_INPUT, BATCH_ANALYSIS]
        direct = groups[0]
        assert direct.count == 2
        assert direct.average_confidence == pytest.approx(0.7)
        assert direct.min_confidence == pytest.approx(0.5)
        assert direct.max_confidence == pytest.approx(0.9)
        assert direct.distribution == {POSITIVE: 2, NEGATIVE: 0, NEUTRAL: 0}
        assert direct.dominant_sentiment == POSITIVE
        assert direct.keywords == ('good', 'nice')
        assert direct.average_length == pytest.approx(5.0)

    def test_by_time(self):
        results = [
            make_result("recent", timestamp=NOW - timedelta(minutes=5)),
            make_result("today", timestamp=NOW - timedelta(hours=3)),
            make_result("old", timestamp=NOW - timedelta(days=3)),
            make_result("older", timestamp=NOW - timedelta(days=30)),
        ]
        groups = compare(results, by='time', now=NOW)

        assert [(group.name, group.count) for group in groups] == [
            ('Last Hour', 1), ('Last 24 Hours', 1), ('Older', 2),
        ]

    def test_by_confidence(self):
        results = [
            make_result("low", confidence=0.4),
            make_result("high", confidence=0.85),
            make_result("mid", confidence=0.6),
        ]
        groups = compare(results, by='confidence')

        assert [group.name for group in groups] == [
            'High Confidence (80%+)', 'Medium Confidence (60-79%)', 'Low Confidence (<60%)',
        ]

    def test_by_length(self):
        results = [make_result("x" * 250), make_result("short text")]
        groups = compare(results, by='length')

        assert [group.name for group in groups] == ['Short (< 50 chars)', 'Long (200+ chars)']

    def test_ties_prefer_positive(self):
        groups = compare([
            make_result("one", NEGATIVE),
            make_result("two", POSITIVE),
        ])

        assert groups[0].dominant_sentiment == POSITIVE

    def test_unknown_dimension(self):
        with pytest.raises(ValueError, match='Unknown comparison'):
            compare([make_result("one")], by='mood')

    def test_empty(self):
        assert compare([], by='source') == []


class TestParseUpload:

    def test_text_file(self):
        content = "Love it!\n\nhi\nTerrible experience.\n".encode('utf-8')
        texts, skipped = parse_upload('reviews.txt', content)

        assert texts == ["Love it!", "Terrible experience."]
        assert skipped == ['Line 2: Text must be at least 3 characters long']

    def test_csv_uses_first_column(self):
        content = '"Great, really great",5\nNot for me,1,extra\n'
        texts, skipped = parse_upload('reviews.CSV', content)

        assert texts == ["Great, really great", "Not for me"]
        assert skipped == []

    def test_bom_is_ignored(self):
        texts, _ = parse_upload('reviews.csv', '\ufeffLove it!\n'.encode('utf-8'))

        assert texts == ["Love it!"]

    @pytest.mark.parametrize("filename, content, message", [
        ('reviews.pdf', b"Love it!", 'Invalid file format'),
        ('reviews', b"Love it!", 'Invalid file format'),
        ('reviews.txt', b"   \n\n", 'File is empty'),
        ('reviews.txt', b"\xff\xfe\xfa", 'UTF-8'),
        ('reviews.txt', b"x" * (5 * 1024 * 1024 + 1), 'File is too large'),
        ('reviews.txt', "\n".join(["Love it!"] * 101).encode('utf-8'), 'Too many texts'),
        ('reviews.txt', b"hi\nok\n", 'No valid texts found in file'),
    ])
    def test_rejected(self, filename, content, message):
        with pytest.raises(UploadError, match=message):
            parse_upload(filename, content)

    def test_upload_error_is_a_validation_error(self):
        assert issubclass(UploadError, InputValidationError)


class TestExports:

    @pytest.fixture
    def results(self):
        return [
            make_result("Love it!", POSITIVE, 0.876, ['love']),
            make_result("Terrible, just terrible", NEGATIVE, 0.61, ['terrible', 'just']),
        ]

    def test_filename(self):
        assert export_filename('csv', date(2026, 10, 17)) == 'sentiment-analysis-2026-10-17.csv'

    def test_csv(self, results):
        lines = to_csv(results).splitlines()

        assert lines[0] == 'Text,Sentiment,Confidence,Keywords,Timestamp,Source'
        assert lines[1] == 'Love it!,positive,88%,love,2026-10-17T12:00:00+00:00,Direct Input'
        assert lines[2].startswith('"Terrible, just terrible",negative,61%,"terrible, just",')

    def test_csv_round_trips_through_pandas(self, results):
        frame = pd.read_csv(io.StringIO(to_csv(results)))

        assert list(frame['Sentiment']) == [POSITIVE, NEGATIVE]

    def test_json(self, results):
        body = json.loads(to_json(results, exported_at=NOW))

        assert body['exportDate'] == '2026-10-17T12:00:00+00:00'
        assert body['totalResults'] == 2
        assert body['summary'][POSITIVE] == 1
        assert body['results'][0]['keywords'] == ['love']

    def test_text_report(self, results):
        report = to_text_report(results, generated_at=NOW)

        assert report.startswith('Sentiment Analysis Report\n')
        assert 'Report Generated: 2026-10-17' in report
        assert 'Total Texts Analyzed: 2' in report
        assert 'Positive: 1 | Negative: 1 | Neutral: 0' in report
        assert '1. POSITIVE (88%)' in report
        assert '   Keywords: terrible, just' in report

    def test_pdf(self, results):
        document = to_pdf(results, generated_at=NOW)

        assert isinstance(document, bytes)
        assert document.startswith(b'%PDF')

    def test_pdf_with_non_latin_text_and_many_pages(self):
        results = [
            make_result(f"Entry {index}: café 😊 中文 " + "long review text " * 20, keywords=['café'])
            for index in range(40)
        ]

        assert to_pdf(results).startswith(b'%PDF')

    def test_exporters(self, results):
        assert set(EXPORTERS) == {'csv', 'json', 'txt', 'pdf'}
        assert EXPORTERS['pdf'] == (to_pdf, 'application/pdf')
        for fmt in ('csv', 'json', 'txt'):
            render, mimetype = EXPORTERS[fmt]
            assert isinstance(render(results), str)
            assert mimetype.startswith(('text/', 'application/'))
