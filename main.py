# main.py

"""Streamlit web UI for the PII detection and anonymization tool.

Provides a simple interface to submit text, inspect detected PII and
download the anonymized output.
"""

import streamlit as st
import logging

from anonymization.core.definitions import AnonymizationMode
from anonymization.core.exceptions import AnonymizationError
from anonymization.logic.anonymizer import assign_placeholders
from anonymization.logging_config import configure_logging
from anonymization.service.config import Settings
from anonymization.service.pipeline import get_service

configure_logging(Settings().log_level, force=False)

logger = logging.getLogger(__name__)

DISPLAY_MODES = [
    AnonymizationMode.REPLACE,
    AnonymizationMode.MASK,
    AnonymizationMode.REMOVE,
]


def main():
    """Run the Streamlit application UI."""
    service = get_service()

    st.set_page_config(layout="wide", page_title="PII Detection", page_icon="🛡️")
    st.title("PII Detection & Anonymization")

    col1, col2 = st.columns(2)

    with col1:
        st.subheader("Input Text")
        text_input = st.text_area(
            "Source Text", height=400, placeholder="Paste text here..."
        )

        if st.button("Detect PII", type="primary"):
            if not text_input or not text_input.strip():
                st.warning("Please enter text to process.")
                logger.warning("Detection attempted with empty input")
            else:
                try:
                    with st.spinner("Analyzing text..."):
                        st.session_state["result"] = service.process(text_input)
                except AnonymizationError:
                    st.error("Processing failed.")
                    logger.error(
                        "Processing failed",
                        exc_info=True,
                        extra={"text_length": len(text_input)},
                    )

    result = st.session_state.get("result")

    with col2:
        st.subheader("Anonymized Output")
        if result is not None:
            mode = st.radio("Mode", DISPLAY_MODES, horizontal=True)
            st.text_area("Anonymized Text", value=service.render(result, mode), height=400)
            tokens = assign_placeholders(result.detections)
            st.dataframe(
                [
                    {"placeholder": token, **d.to_dict()}
                    for d, token in zip(result.detections, tokens)
                ]
            )

            for fmt in ("json", "csv", "txt"):
                try:
                    artifact = service.export(fmt, result)
                except AnonymizationError as e:
                    st.error(str(e))
                    continue
                st.download_button(
                    f"Export {fmt.upper()}",
                    data=artifact.content,
                    file_name=artifact.filename,
                    mime=artifact.mime_type,
                )

    with st.sidebar:
        info = service.model_info()
        st.header("Model")
        st.markdown(f"**{info['name']}** ({info['status']}), accuracy {info['accuracy']}")

        st.header("Statistics")
        stats = service.get_stats()
        st.metric("Documents", stats.total_documents)
        st.metric("Detections", stats.total_detections)
        st.metric("Average confidence", f"{stats.average_confidence * 100:.1f}%")
        if st.button("Reset statistics"):
            service.reset_stats()


if __name__ == "__main__":
    main()
