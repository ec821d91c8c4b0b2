#!/usr/bin/env python3
# Sentiment Analysis Streamlit Dashboard

import pandas as pd
import streamlit as st

from evaluation import SAMPLE_TEST_DATA, balanced_sample, evaluate
from sentiment_analysis import SentimentEngine
from sentiment_reports import (
    COMPARISONS, EXPORTERS, InputValidationError, analyze_batch, analyze_text,
    compare, export_filename, parse_upload, results_frame, summarize,
)

st.set_page_config(
    page_title="Sentiment Analysis Dashboard",
    page_icon="😊",
    layout="wide"
)

SENTIMENT_STYLES = {
    'positive': ("rgba(39, 174, 96, 0.2)", "😃"),
    'negative': ("rgba(231, 76, 60, 0.2)", "😔"),
    'neutral': ("rgba(127, 140, 141, 0.2)", "😐"),
}

EXAMPLES = [
    "I absolutely love this product! It exceeded all my expectations.",
    "Terrible experience. Worst customer service I have ever encountered.",
    "The product is okay. Nothing special but does what it says.",
    "Not the worst I have seen, but definitely not good enough.",
    "Customer service was excellent, very helpful and polite. 😊",
]


@st.cache_resource
def get_engine():
    return SentimentEngine()


engine = get_engine()
st.session_state.setdefault('results', [])
st.session_state.setdefault('text_input', '')


def _use_example(text):
    st.session_state.text_input = text


def _add_results(results):
    st.session_state.results = list(results) + st.session_state.results


def show_result(result, details=None, show_scores=False, show_tagged=False):
    color, emoji = SENTIMENT_STYLES[result.sentiment]
    st.markdown(f"""
    <div style="padding: 20px; border-radius: 10px; background-color: {color}; margin-bottom: 20px;">
        <h2 style="text-align: center; margin: 0;">{emoji} {result.sentiment.title()}</h2>
    </div>
    """, unsafe_allow_html=True)

    st.write(f"**Confidence:** {result.confidence:.2f}")
    st.progress(float(result.confidence))
    if result.keywords:
        st.write("**Keywords:** " + ", ".join(result.keywords))

    if details and show_scores:
        st.bar_chart(pd.Series(details['scores'], name='score'))
    if details and show_tagged:
        with st.expander("View text preprocessing"):
            st.code(details['tagged'])
            st.json(details['matches'])


st.title("Sentiment Analysis Dashboard")
st.write("Analyze text sentiment (positive, negative, or neutral) with keywords and reports")

single_tab, batch_tab, compare_tab, accuracy_tab = st.tabs(
    ["Single Text", "Batch", "Comparative Analysis", "Accuracy Test"]
)

with single_tab:
    text_input = st.text_area("Text", height=150, max_chars=10000, key='text_input',
                              placeholder="Type or paste text here...")

    with st.expander("Advanced Options"):
        show_scores = st.checkbox("Show score distribution", value=False)
        show_tagged = st.checkbox("Show preprocessing and matched terms", value=False)

    if st.button("Analyze Sentiment", type="primary"):
        try:
            result = analyze_text(engine, text_input)
        except InputValidationError as e:
            st.warning(str(e))
        else:
            _add_results([result])
            show_result(result, engine.explain(result.text), show_scores, show_tagged)

    with st.expander("Example texts to try"):
        for example in EXAMPLES:
            st.button(example[:50] + "..." if len(example) > 50 else example,
                      key=f"example-{example}", on_click=_use_example, args=(example,))

with batch_tab:
    batch_input = st.text_area("One text per line", height=200)
    upload = st.file_uploader("Or upload a file (.txt, .csv)", type=['txt', 'csv'])

    if st.button("Analyze Batch"):
        try:
            skipped = []
            if upload is not None:
                texts, skipped = parse_upload(upload.name, upload.getvalue())
            else:
                texts = [line for line in batch_input.splitlines() if line.strip()]
            with st.spinner("Analyzing texts..."):
                batch = analyze_batch(engine, texts)
        except InputValidationError as e:
            st.error(str(e))
        else:
            _add_results(batch.results)
            skipped = skipped + list(batch.skipped)
            if skipped:
                st.warning(f"{len(skipped)} texts were skipped: " + "; ".join(skipped))
            summary = batch.summary
            columns = st.columns(4)
            columns[0].metric("Total", summary['total'])
            columns[1].metric("Positive", summary['positive'])
            columns[2].metric("Negative", summary['negative'])
            columns[3].metric("Neutral", summary['neutral'])
            st.write(f"**Average confidence:** {summary['averageConfidence']:.2f}")

results = st.session_state.results

with compare_tab:
    if not results:
        st.info("Analyze some texts to compare them")
    else:
        by = st.selectbox("Compare by", COMPARISONS)
        groups = compare(results, by=by)
        chart = pd.DataFrame(
            {group.name: group.distribution for group in groups}
        ).T
        st.bar_chart(chart)
        for group in groups:
            with st.expander(f"{group.name} ({group.count} texts)"):
                st.write(f"**Dominant sentiment:** {group.dominant_sentiment}")
                st.write(f"**Average confidence:** {group.average_confidence:.2f} "
                         f"(min {group.min_confidence:.2f}, max {group.max_confidence:.2f})")
                st.write(f"**Average length:** {group.average_length:.0f} characters")
                if group.keywords:
                    st.write("**Top keywords:** " + ", ".join(group.keywords))

with accuracy_tab:
    st.write(f"{len(SAMPLE_TEST_DATA)} labelled sample texts are available.")
    balanced = st.checkbox("Use a balanced sample of 15", value=False)
    if st.button("Run Accuracy Test"):
        entries = balanced_sample(15) if balanced else list(SAMPLE_TEST_DATA)
        report = evaluate(engine, entries)
        st.metric("Accuracy", f"{report.accuracy:.0%}")
        st.dataframe(pd.DataFrame(report.by_sentiment).T)
        st.dataframe(pd.DataFrame(report.by_difficulty).T)
        st.dataframe(pd.DataFrame(report.outcomes))

# Results and exports
st.markdown("---")
st.subheader("Results")
if results:
    summary = summarize(results)
    st.bar_chart(pd.Series({s: summary[s] for s in ('positive', 'negative', 'neutral')}, name='texts'))
    frame = results_frame(results)
    frame['keywords'] = frame['keywords'].apply(', '.join)
    st.dataframe(frame.drop(columns=['id']))

    columns = st.columns(len(EXPORTERS))
    for column, (fmt, (render, mimetype)) in zip(columns, EXPORTERS.items()):
        column.download_button(f"Export {fmt.upper()}", render(results),
                               file_name=export_filename(fmt), mime=mimetype)
    if st.button("Clear results"):
        st.session_state.results = []
        st.rerun()
else:
    st.write("No results yet.")

# Footer
st.markdown("---")
st.markdown(
    "Built with Streamlit using a lexicon-based sentiment engine. "
    "Handles negation, intensifiers, emojis and emoticons."
)
