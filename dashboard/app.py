"""
Sales Tiers — Streamlit Dashboard
=================================

Single-page view of a sales-by-practice workbook classified into tiers.

On first load the configured default workbook
(``config.data.default_workbook``) is classified.  Uploading an ``.xlsx`` or
``.xls`` file replaces the displayed classification; a failed upload keeps
the previous classification and shows the error above it.

Page layout
-----------
  1. Upload control and current file name.
  2. Error banner (only after a failed load).
  3. Classification criteria box.
  4. Practice count per tier.
  5. One tab per tier (S, A, B, C) with a card per practice:
     rank, practice name and total sales.

Usage
-----
    pip install -e ".[dashboard]"
    streamlit run dashboard/app.py
"""

from __future__ import annotations

import sys
from pathlib import Path

# ── Ensure project root is importable ────────────────────────────────────────
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import streamlit as st

# ── Must be the first Streamlit call ─────────────────────────────────────────
st.set_page_config(
    page_title="Sales Classification Dashboard",
    layout="wide",
)

from dashboard.data_loader import default_workbook_mtime, get_config, load_default
from sales_tiers.reporting.formatters import format_currency
from sales_tiers.session import load_uploaded_workbook
from sales_tiers.taxonomy.tier_taxonomy import TIER_ORDER, describe_fractions

_STATE_KEY = "dashboard_state"
_UPLOAD_KEY = "processed_upload_id"
_CARDS_PER_ROW = 3

config = get_config()
currency_symbol = config.display.currency_symbol


def _md_escape(text: str) -> str:
    """Escape characters Streamlit markdown would treat as LaTeX or emphasis."""
    return text.replace("\\", "\\\\").replace("$", "\\$").replace("*", "\\*").replace("_", "\\_")


# ── Initial load ──────────────────────────────────────────────────────────────

if _STATE_KEY not in st.session_state:
    with st.spinner("Processing data..."):
        st.session_state[_STATE_KEY] = load_default(
            config,
            config.data.default_workbook,
            default_workbook_mtime(config),
        )


# ── Header + upload ───────────────────────────────────────────────────────────

st.title("Sales Classification Dashboard")

uploaded = st.file_uploader(
    "Import Excel File",
    type=["xlsx", "xls"],
    help="The first sheet must contain Practice and Sales columns.",
)

# The uploader keeps returning the same file on every rerun; process it once.
if uploaded is not None and st.session_state.get(_UPLOAD_KEY) != uploaded.file_id:
    with st.spinner("Processing data..."):
        st.session_state[_STATE_KEY] = load_uploaded_workbook(
            config,
            uploaded.name,
            uploaded.getvalue(),
            st.session_state[_STATE_KEY],
        )
    st.session_state[_UPLOAD_KEY] = uploaded.file_id

state = st.session_state[_STATE_KEY]

if state.file_name:
    st.caption(f"Current file: {state.file_name}")

if state.error:
    st.error(state.error)


# ── Criteria ──────────────────────────────────────────────────────────────────

descriptions = describe_fractions(config.tiers.fractions)

with st.container(border=True):
    st.markdown("**Classification Criteria:**")
    left, right = st.columns(2)
    for column, tiers in ((left, TIER_ORDER[:2]), (right, TIER_ORDER[2:])):
        with column:
            for tier in tiers:
                st.markdown(f"**Class {tier.value}:** {descriptions[tier]}")


# ── Counts ────────────────────────────────────────────────────────────────────

counts = state.result.counts()
for column, tier in zip(st.columns(len(TIER_ORDER)), TIER_ORDER):
    column.metric(f"Class {tier.value}", counts[tier], help="practices")


# ── Tier tabs ─────────────────────────────────────────────────────────────────

if not state.loaded:
    st.info("Processing data...")
else:
    tabs = st.tabs([f"Class {tier.value}" for tier in TIER_ORDER])
    for tab, tier in zip(tabs, TIER_ORDER):
        with tab:
            entries = state.result.tiers[tier]
            if not entries:
                st.info(f"No practices in Class {tier.value}.")
                continue

            for start in range(0, len(entries), _CARDS_PER_ROW):
                row = entries[start:start + _CARDS_PER_ROW]
                for column, entry in zip(st.columns(_CARDS_PER_ROW), row):
                    with column.container(border=True):
                        st.caption(f"Rank #{entry.rank}")
                        st.markdown(_md_escape(entry.key))
                        sales = _md_escape(format_currency(entry.rounded_amount, currency_symbol))
                        st.markdown(f":green[**{sales}**]")
