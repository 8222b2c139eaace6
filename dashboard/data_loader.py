"""
Dashboard data loader.

Thin Streamlit-cached wrappers around ``sales_tiers.session``.  The session
module does the real work and returns plain ``DashboardState`` values; this
module only adds caching so reruns do not re-decode the default workbook.

The default workbook is cached on ``(path, mtime)`` so an edited file is
picked up without clearing the cache.  Uploads are not cached here: the app
processes each uploaded file once and keeps the resulting state in
``st.session_state``.
"""

from __future__ import annotations

import os

import streamlit as st

from sales_tiers.config import AppConfig, load_config
from sales_tiers.session import DashboardState, load_default_workbook
from sales_tiers.utils.logging import configure_logging


@st.cache_data
def get_config() -> AppConfig:
    """Load config and configure logging once per Streamlit server process."""
    config = load_config()
    configure_logging(config.logging)
    return config


def default_workbook_mtime(config: AppConfig) -> float | None:
    """Return the default workbook's mtime, or ``None`` if it does not exist."""
    try:
        return os.path.getmtime(config.data.default_workbook)
    except OSError:
        return None


@st.cache_data(ttl=300)
def load_default(_config: AppConfig, workbook_path: str, mtime: float | None) -> DashboardState:
    """Classify the default workbook.

    ``workbook_path`` and ``mtime`` form the cache key; ``_config`` is
    excluded from hashing by its leading underscore.
    """
    return load_default_workbook(_config)
