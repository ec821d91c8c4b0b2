#!/usr/bin/env python3
# Result records, batch summaries, comparisons and exports (CSV, JSON, text, PDF)

import csv
import io
import json
import logging
import os
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from sentiment_lexicon import NEGATIVE, NEUTRAL, POSITIVE, SENTIMENTS

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 10000
MIN_TEXT_LENGTH = 3
MAX_BATCH_SIZE = 100
MAX_FILE_SIZE = 5 * 1024 * 1024
ALLOWED_EXTENSIONS = ('.txt', '.csv')

DIRECT_INPUT = 'Direct Input'
BATCH_ANALYSIS = 'Batch Analysis'
FALLBACK_ANALYSIS = 'Fallback Analysis'

COMPARISONS = ('source', 'time', 'confidence', 'length')


class InputValidationError(ValueError):
    """Raised when text or a batch does not meet the input limits."""


class UploadError(InputValidationError):
    """Raised when an uploaded file cannot be turned into texts."""


def validate_text(text):
    """Return an error message for invalid input, or None when the text is acceptable"""
    if not isinstance(text, str) or not text.strip():
        return 'Text cannot be empty'
    if len(text) > MAX_TEXT_LENGTH:
        return f'Text is too long. Maximum {MAX_TEXT_LENGTH} characters allowed'
    if len(text.strip()) < MIN_TEXT_LENGTH:
        return f'Text must be at least {MIN_TEXT_LENGTH} characters long'
    return None


def ensure_valid_text(text):
    error = validate_text(text)
    if error:
        raise InputValidationError(error)
    return text.strip()


def _utcnow():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SentimentResult:
    id: str
    text: str
    sentiment: str
    confidence: float
    keywords: tuple
    timestamp: datetime
    source: str = DIRECT_INPUT

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'sentiment': self.sentiment,
            'confidence': self.confidence,
            'keywords': list(self.keywords),
            'timestamp': self.timestamp.isoformat(),
            'source': self.source,
        }


@dataclass(frozen=True)
class BatchAnalysisResult:
    id: str
    results: tuple
    summary: dict
    timestamp: datetime
    skipped: tuple = field(default_factory=tuple)

    def to_dict(self):
        return {
            'id': self.id,
            'results': [result.to_dict() for result in self.results],
            'summary': self.summary,
            'timestamp': self.timestamp.isoformat(),
            'skipped': list(self.skipped),
        }


def _new_id():
    return uuid.uuid4().hex


def analyze_text(engine, text, source=DIRECT_INPUT, now=None):
    """Validate and score one text, producing a SentimentResult.

    Validation errors propagate. If scoring itself raises, a neutral fallback
    record is returned instead.
    """
    text = ensure_valid_text(text)
    timestamp = now or _utcnow()
    try:
        sentiment, confidence, keywords = engine.classify(text)
    except Exception as e:
        logger.warning("Analysis failed, recording fallback result: %s", e)
        return SentimentResult(_new_id(), text, NEUTRAL, 0.5, (), timestamp, FALLBACK_ANALYSIS)
    return SentimentResult(_new_id(), text, sentiment, confidence, tuple(keywords), timestamp, source)


def analyze_batch(engine, texts, source=BATCH_ANALYSIS, now=None):
    """Score each valid text independently; invalid items are skipped and reported"""
    if not isinstance(texts, (list, tuple)) or not texts:
        raise InputValidationError('Batch analysis requires a list of texts')
    if len(texts) > MAX_BATCH_SIZE:
        raise InputValidationError(f'Batch size too large. Maximum {MAX_BATCH_SIZE} texts allowed')

    timestamp = now or _utcnow()
    results = []
    skipped = []
    for index, text in enumerate(texts):
        error = validate_text(text)
        if error:
            skipped.append(f'Item {index + 1}: {error}')
            continue
        results.append(analyze_text(engine, text, source=source, now=timestamp))

    if skipped:
        logger.warning("Batch analysis skipped %d of %d texts", len(skipped), len(texts))
    if not results:
        raise InputValidationError('No valid texts found. All texts are either empty or too short')

    return BatchAnalysisResult(
        id=_new_id(),
        results=tuple(results),
        summary=summarize(results),
        timestamp=timestamp,
        skipped=tuple(skipped),
    )


def summarize(results):
    counts = Counter(result.sentiment for result in results)
    confidences = [result.confidence for result in results]
    return {
        'total': len(results),
        POSITIVE: counts.get(POSITIVE, 0),
        NEGATIVE: counts.get(NEGATIVE, 0),
        NEUTRAL: counts.get(NEUTRAL, 0),
        'averageConfidence': float(np.mean(confidences)) if confidences else 0.0,
    }


def results_frame(results):
    """Results as a DataFrame, one row per result"""
    columns = ['id', 'text', 'sentiment', 'confidence', 'keywords', 'timestamp', 'source']
    if not results:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([
        {
            'id': result.id,
            'text': result.text,
            'sentiment': result.sentiment,
            'confidence': result.confidence,
            'keywords': list(result.keywords),
            'timestamp': result.timestamp,
            'source': result.source or DIRECT_INPUT,
        }
        for result in results
    ], columns=columns)


@dataclass(frozen=True)
class ComparisonGroup:
    name: str
    count: int
    average_confidence: float
    distribution: dict
    dominant_sentiment: str
    keywords: tuple
    min_confidence: float
    max_confidence: float
    average_length: float

    def to_dict(self):
        return {
            'name': self.name,
            'count': self.count,
            'averageConfidence': self.average_confidence,
            'distribution': dict(self.distribution),
            'dominantSentiment': self.dominant_sentiment,
            'keywords': list(self.keywords),
            'minConfidence': self.min_confidence,
            'maxConfidence': self.max_confidence,
            'averageLength': self.average_length,
        }


def _time_bucket(timestamp, now):
    if timestamp > now - timedelta(hours=1):
        return 'Last Hour'
    if timestamp > now - timedelta(days=1):
        return 'Last 24 Hours'
    return 'Older'


def _confidence_bucket(confidence):
    if confidence >= 0.8:
        return 'High Confidence (80%+)'
    if confidence >= 0.6:
        return 'Medium Confidence (60-79%)'
    return 'Low Confidence (<60%)'


def _length_bucket(length):
    if length < 50:
        return 'Short (< 50 chars)'
    if length < 200:
        return 'Medium (50-200 chars)'
    return 'Long (200+ chars)'


BUCKET_ORDER = {
    'time': ['Last Hour', 'Last 24 Hours', 'Older'],
    'confidence': ['High Confidence (80%+)', 'Medium Confidence (60-79%)', 'Low Confidence (<60%)'],
    'length': ['Short (< 50 chars)', 'Medium (50-200 chars)', 'Long (200+ chars)'],
}


def compare(results, by='source', now=None):
    """Group results by source, age, confidence band or text length"""
    if by not in COMPARISONS:
        raise ValueError(f"Unknown comparison '{by}', expected one of {', '.join(COMPARISONS)}")
    df = results_frame(results)
    if df.empty:
        return []

    if by == 'source':
        df['group'] = df['source']
    elif by == 'time':
        now = now or _utcnow()
        df['group'] = [_time_bucket(result.timestamp, now) for result in results]
    elif by == 'confidence':
        df['group'] = df['confidence'].apply(_confidence_bucket)
    else:
        df['group'] = df['text'].str.len().apply(_length_bucket)

    order = BUCKET_ORDER.get(by) or list(dict.fromkeys(df['group']))
    groups = []
    for name in order:
        rows = df[df['group'] == name]
        if rows.empty:
            continue
        counts = rows['sentiment'].value_counts()
        distribution = {sentiment: int(counts.get(sentiment, 0)) for sentiment in SENTIMENTS}
        dominant = max(SENTIMENTS, key=lambda s: (distribution[s], -SENTIMENTS.index(s)))
        keyword_counts = Counter(keyword for keywords in rows['keywords'] for keyword in keywords)
        groups.append(ComparisonGroup(
            name=name,
            count=len(rows),
            average_confidence=float(rows['confidence'].mean()),
            distribution=distribution,
            dominant_sentiment=dominant,
            keywords=tuple(keyword for keyword, _ in keyword_counts.most_common(5)),
            min_confidence=float(rows['confidence'].min()),
            max_confidence=float(rows['confidence'].max()),
            average_length=float(rows['text'].str.len().mean()),
        ))
    return groups


def parse_upload(filename, content):
    """Turn an uploaded .txt or .csv file into candidate texts.

    Returns ``(texts, skipped)`` where ``skipped`` lists the lines rejected by
    validation. Raises UploadError when nothing usable remains.
    """
    extension = os.path.splitext(filename or '')[1].lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise UploadError('Invalid file format. Only .txt and .csv files are supported')

    if isinstance(content, bytes):
        if len(content) > MAX_FILE_SIZE:
            raise UploadError(f'File is too large. Maximum size is {MAX_FILE_SIZE // (1024 * 1024)}MB')
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError as e:
            raise UploadError('File must be UTF-8 encoded text') from e
    elif len(content.encode('utf-8')) > MAX_FILE_SIZE:
        raise UploadError(f'File is too large. Maximum size is {MAX_FILE_SIZE // (1024 * 1024)}MB')

    if not content.strip():
        raise UploadError('File is empty')

    if extension == '.csv':
        lines = [row[0].strip() if row else '' for row in csv.reader(io.StringIO(content))]
    else:
        lines = [line.strip() for line in content.splitlines()]
    lines = [line for line in lines if line]

    if not lines:
        raise UploadError('No valid text content found in file')
    if len(lines) > MAX_BATCH_SIZE:
        raise UploadError(f'Too many texts in file. Maximum {MAX_BATCH_SIZE} texts allowed')

    texts = []
    skipped = []
    for index, line in enumerate(lines):
        error = validate_text(line)
        if error:
            skipped.append(f'Line {index + 1}: {error}')
        else:
            texts.append(line)

    if not texts:
        raise UploadError('No valid texts found in file. All texts are either empty or too short')
    if skipped:
        logger.warning("Upload %s: skipped %d invalid lines", filename, len(skipped))
    return texts, skipped


def export_filename(fmt, today=None):
    today = today or _utcnow().date()
    return f"sentiment-analysis-{today.isoformat()}.{fmt}"


def to_csv(results):
    frame = pd.DataFrame([
        {
            'Text': result.text,
            'Sentiment': result.sentiment,
            'Confidence': f"{round(result.confidence * 100)}%",
            'Keywords': ', '.join(result.keywords),
            'Timestamp': result.timestamp.isoformat(),
            'Source': result.source or DIRECT_INPUT,
        }
        for result in results
    ], columns=['Text', 'Sentiment', 'Confidence', 'Keywords', 'Timestamp', 'Source'])
    return frame.to_csv(index=False)


def to_json(results, exported_at=None):
    exported_at = exported_at or _utcnow()
    return json.dumps({
        'exportDate': exported_at.isoformat(),
        'totalResults': len(results),
        'summary': summarize(results),
        'results': [result.to_dict() for result in results],
    }, indent=2, ensure_ascii=False)


REPORT_TITLE = 'Sentiment Analysis Report'


def _summary_lines(results, generated_at):
    summary = summarize(results)
    return [
        f"Report Generated: {generated_at.date().isoformat()}",
        f"Total Texts Analyzed: {summary['total']}",
        f"Positive: {summary[POSITIVE]} | Negative: {summary[NEGATIVE]} | Neutral: {summary[NEUTRAL]}",
        f"Average Confidence: {round(summary['averageConfidence'] * 100)}%",
    ]


def _entry_heading(index, result):
    return f"{index}. {result.sentiment.upper()} ({round(result.confidence * 100)}%)"


def to_text_report(results, generated_at=None):
    """Plain-text report: summary header followed by one entry per result"""
    generated_at = generated_at or _utcnow()
    lines = [REPORT_TITLE, ''] + _summary_lines(results, generated_at) + ['']
    for index, result in enumerate(results, start=1):
        lines.append(_entry_heading(index, result))
        lines.append(f"   {result.text}")
        if result.keywords:
            lines.append(f"   Keywords: {', '.join(result.keywords)}")
        lines.append('')
    return '\n'.join(lines)


def _latin1(text):
    # The core PDF fonts only cover Latin-1
    return text.encode('latin-1', 'replace').decode('latin-1')


def to_pdf(results, generated_at=None):
    """PDF report: title, summary block, then one entry per result"""
    generated_at = generated_at or _utcnow()
    pdf = FPDF()
    pdf.set_margins(20, 20)
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.add_page()

    pdf.set_font('Helvetica', 'B', 20)
    pdf.cell(0, 12, REPORT_TITLE, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)

    pdf.set_font('Helvetica', size=12)
    for line in _summary_lines(results, generated_at):
        pdf.cell(0, 8, line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(8)

    pdf.set_font('Helvetica', size=10)
    for index, result in enumerate(results, start=1):
        pdf.cell(0, 7, _entry_heading(index, result), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_x(25)
        pdf.multi_cell(0, 5, _latin1(result.text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if result.keywords:
            pdf.set_x(25)
            pdf.multi_cell(0, 5, _latin1(f"Keywords: {', '.join(result.keywords)}"),
                           new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(5)
    return bytes(pdf.output())


EXPORTERS = {
    'csv': (to_csv, 'text/csv'),
    'json': (to_json, 'application/json'),
    'txt': (to_text_report, 'text/plain'),
    'pdf': (to_pdf, 'application/pdf'),
}
