#!/usr/bin/env python3
# Sentiment Analysis Web Application

import logging

from flask import Flask, Response, jsonify, render_template_string, request

from sentiment_analysis import SentimentEngine
from sentiment_reports import (
    COMPARISONS, EXPORTERS, InputValidationError, analyze_batch, analyze_text, compare,
    ensure_valid_text, export_filename, parse_upload,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)
engine = SentimentEngine()


def _json_payload():
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InputValidationError('Request body must be a JSON object')
    return payload


def _request_texts():
    """Texts from a JSON body (``texts``) or an uploaded .txt/.csv file"""
    upload = request.files.get('file')
    if upload is not None and upload.filename:
        texts, skipped = parse_upload(upload.filename, upload.read())
        return texts, skipped
    payload = _json_payload()
    return payload.get('texts'), []


@app.errorhandler(InputValidationError)
def handle_invalid_input(error):
    return jsonify({'error': str(error)}), 400


@app.route('/')
def home():
    """Render the home page with the sentiment analysis form"""
    return render_template_string(INDEX_HTML)


@app.route('/predict', methods=['POST'])
def predict():
    """Score a single text and return the ranked distribution with keywords"""
    payload = _json_payload()
    text = request.form.get('text', payload.get('text', ''))
    text = ensure_valid_text(text)

    distribution = engine.analyze_sentiment(text)
    sentiment = distribution.sentiment
    return jsonify({
        'text': text,
        'sentiment': sentiment,
        'confidence': round(distribution.confidence, 4),
        'scores': distribution.to_list(),
        'keywords': engine.extract_keywords(text, sentiment),
    })


@app.route('/explain', methods=['POST'])
def explain():
    payload = _json_payload()
    text = ensure_valid_text(request.form.get('text', payload.get('text', '')))
    return jsonify(engine.explain(text))


@app.route('/batch', methods=['POST'])
def batch():
    texts, skipped = _request_texts()
    result = analyze_batch(engine, texts)
    body = result.to_dict()
    body['skipped'] = skipped + body['skipped']
    return jsonify(body)


@app.route('/compare', methods=['POST'])
def comparison():
    payload = _json_payload()
    by = request.form.get('by') or payload.get('by', 'source')
    if by not in COMPARISONS:
        return jsonify({'error': f"Unknown comparison '{by}'"}), 400
    texts, _ = _request_texts()
    result = analyze_batch(engine, texts)
    groups = compare(result.results, by=by)
    return jsonify({'by': by, 'groups': [group.to_dict() for group in groups]})


@app.route('/export/<fmt>', methods=['POST'])
def export(fmt):
    if fmt not in EXPORTERS:
        return jsonify({'error': f"Unsupported export format '{fmt}'"}), 400
    texts, _ = _request_texts()
    if isinstance(texts, str):
        results = [analyze_text(engine, texts)]
    else:
        results = list(analyze_batch(engine, texts).results)

    render, mimetype = EXPORTERS[fmt]
    return Response(
        render(results),
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename={export_filename(fmt)}'},
    )


INDEX_HTML = '''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Sentiment Analysis Dashboard</title>
    <style>
        body { font-family: system-ui, sans-serif; max-width: 860px; margin: 0 auto; padding: 24px; color: #2d3436; background: #f4f6f8; }
        section { background: #fff; border-radius: 10px; padding: 18px 22px; margin-bottom: 18px; box-shadow: 0 1px 6px rgba(0, 0, 0, 0.08); }
        h1 { text-align: center; color: #34495e; }
        h2 { margin-top: 0; font-size: 1.1em; }
        textarea { width: 100%; min-height: 110px; box-sizing: border-box; padding: 8px; font: inherit; }
        .actions { display: flex; gap: 8px; flex-wrap: wrap; margin-top: 10px; }
        .actions button { background: #2e86de; color: #fff; border: 0; border-radius: 5px; padding: 8px 14px; cursor: pointer; }
        .actions button.secondary { background: #8395a7; }
        .panel { margin-top: 14px; padding: 12px; border-radius: 6px; display: none; }
        .panel.positive { background: #e3f6ec; border-left: 5px solid #27ae60; }
        .panel.negative { background: #fbe7e6; border-left: 5px solid #c0392b; }
        .panel.neutral { background: #eef1f4; border-left: 5px solid #7f8c8d; }
        .panel.error { background: #fbe7e6; color: #c0392b; }
        .bar { height: 8px; background: #2e86de; border-radius: 4px; }
        table { width: 100%; border-collapse: collapse; }
        td, th { text-align: left; padding: 4px 6px; border-bottom: 1px solid #eee; }
    </style>
</head>
<body>
    <h1>Sentiment Analysis Dashboard</h1>

    <section>
        <h2>Single text</h2>
        <textarea id="single" maxlength="10000" placeholder="Type or paste text to analyze..."></textarea>
        <div class="actions">
            <button onclick="predict()">Analyze Sentiment</button>
        </div>
        <div id="single-result" class="panel"></div>
    </section>

    <section>
        <h2>Batch</h2>
        <textarea id="batch" placeholder="One text per line"></textarea>
        <input type="file" id="upload" accept=".txt,.csv">
        <div class="actions">
            <button onclick="batch()">Analyze Batch</button>
            <button class="secondary" onclick="download('csv')">Export CSV</button>
            <button class="secondary" onclick="download('json')">Export JSON</button>
            <button class="secondary" onclick="download('txt')">Export Report</button>
            <button class="secondary" onclick="download('pdf')">Export PDF</button>
        </div>
        <div id="batch-result" class="panel"></div>
    </section>

    <script>
        function show(id, className, html) {
            const panel = document.getElementById(id);
            panel.className = 'panel ' + className;
            panel.innerHTML = html;
            panel.style.display = 'block';
        }

        function escapeHtml(text) {
            const div = document.createElement('div');
            div.textContent = text;
            return div.innerHTML;
        }

        function batchRequest() {
            const upload = document.getElementById('upload').files[0];
            if (upload) {
                const form = new FormData();
                form.append('file', upload);
                return {method: 'POST', body: form};
            }
            const texts = document.getElementById('batch').value.split('\\n').filter(line => line.trim());
            return {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify({texts: texts})};
        }

        async function predict() {
            const form = new FormData();
            form.append('text', document.getElementById('single').value.trim());
            const data = await (await fetch('/predict', {method: 'POST', body: form})).json();
            if (data.error) {
                return show('single-result', 'error', escapeHtml(data.error));
            }
            const bars = data.scores.map(item =>
                `<div>${item.label}: ${Math.round(item.score * 100)}%</div>` +
                `<div class="bar" style="width: ${item.score * 100}%"></div>`).join('');
            show('single-result', data.sentiment,
                `<strong>${data.sentiment}</strong> (${Math.round(data.confidence * 100)}% confidence)` +
                `<p>Keywords: ${escapeHtml(data.keywords.join(', ') || '-')}</p>${bars}`);
        }

        async function batch() {
            const data = await (await fetch('/batch', batchRequest())).json();
            if (data.error) {
                return show('batch-result', 'error', escapeHtml(data.error));
            }
            const s = data.summary;
            const rows = data.results.map(r =>
                `<tr><td>${escapeHtml(r.text)}</td><td>${r.sentiment}</td><td>${Math.round(r.confidence * 100)}%</td></tr>`).join('');
            const skipped = data.skipped.length ? `<p>Skipped: ${escapeHtml(data.skipped.join('; '))}</p>` : '';
            show('batch-result', 'neutral',
                `<p>${s.total} texts: ${s.positive} positive, ${s.negative} negative, ${s.neutral} neutral ` +
                `(average confidence ${Math.round(s.averageConfidence * 100)}%)</p>${skipped}` +
                `<table><tr><th>Text</th><th>Sentiment</th><th>Confidence</th></tr>${rows}</table>`);
        }

        async function download(fmt) {
            const response = await fetch('/export/' + fmt, batchRequest());
            if (!response.ok) {
                const data = await response.json();
                return show('batch-result', 'error', escapeHtml(data.error));
            }
            const link = document.createElement('a');
            link.href = URL.createObjectURL(await response.blob());
            link.download = 'sentiment-analysis.' + fmt;
            link.click();
        }
    </script>
</body>
</html>'''


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    print("Starting sentiment analysis web application...")
    print("Open http://127.0.0.1:5000/ in your browser")
    app.run(debug=True)
