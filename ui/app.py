"""Streamlit UI for the data ingestion API.

Run with: streamlit run ui/app.py
"""

# Add project root to sys.path for imports to work when run via streamlit
import sys
import time
from pathlib import Path

_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import httpx  # noqa: E402
import streamlit as st  # noqa: E402

from backend.app.config import get_settings  # noqa: E402
from ui.helpers import (  # noqa: E402
    PRIORITIES,
    build_batch_rows,
    describe_error,
    fetch_status,
    parse_ids,
    submit_ingestion,
    summarize_status,
)

# Configuration
BACKEND_URL = get_settings().backend_url
POLL_SECONDS = 5

# Page config
st.set_page_config(page_title="Data Ingestion", page_icon="📥", layout="wide")

# Initialize session state
if "ingestion_id" not in st.session_state:
    st.session_state.ingestion_id = None
if "error" not in st.session_state:
    st.session_state.error = None

st.title("📥 Data Ingestion")
st.divider()

col_left, col_right = st.columns([1, 2])

# =============================================================================
# LEFT COLUMN - SUBMISSION FORM
# =============================================================================
with col_left:
    st.subheader("Submit IDs")

    with st.form("ingest_form"):
        ids_raw = st.text_input("IDs *", value="1, 2, 3, 4, 5", help="Comma-separated integers")
        priority = st.selectbox("Priority", options=PRIORITIES, index=1)
        submitted = st.form_submit_button("Submit", type="primary", use_container_width=True)

        if submitted:
            try:
                ids = parse_ids(ids_raw)
                if not ids:
                    raise ValueError("Enter at least one ID")
                result = submit_ingestion(BACKEND_URL, ids, priority)
                st.session_state.ingestion_id = result["ingestion_id"]
                st.session_state.error = None
            except httpx.HTTPStatusError as e:
                st.session_state.error = describe_error(e)
            except (ValueError, httpx.HTTPError) as e:
                st.session_state.error = str(e)

    if st.session_state.error:
        st.error(f"❌ {st.session_state.error}")

    lookup = st.text_input("Track an existing ingestion ID")
    if lookup.strip():
        st.session_state.ingestion_id = lookup.strip()

# =============================================================================
# RIGHT COLUMN - STATUS (polled)
# =============================================================================
with col_right:
    st.subheader("Ingestion Status")

    ingestion_id = st.session_state.ingestion_id
    if not ingestion_id:
        st.info("👈 Submit IDs to see batch progress here.")
    else:
        st.caption(f"Ingestion ID: `{ingestion_id}`")
        try:
            status = fetch_status(BACKEND_URL, ingestion_id)
        except httpx.HTTPStatusError as e:
            st.error(describe_error(e))
            status = None
        except httpx.HTTPError as e:
            st.error(str(e))
            status = None

        if status:
            summary = summarize_status(status)
            st.markdown(f"**Status:** {summary['status']}")
            st.progress(
                summary["progress"],
                text=f"{summary['completed_batches']}/{summary['total_batches']} batches",
            )
            st.dataframe(build_batch_rows(status), use_container_width=True, hide_index=True)

            if not summary["finished"]:
                time.sleep(POLL_SECONDS)
                st.rerun()
