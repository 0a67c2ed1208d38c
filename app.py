import esg_dashboard.bootstrap_env  # must be first to set env/secrets
import logging

import streamlit as st

from esg_dashboard.config import TABS, Settings, configure_logging
from esg_dashboard.data import store
from esg_dashboard.data.filters import FilterState, apply_filters, companies_to_frame, serialize_filters
from esg_dashboard.data.loader import cached_fetch_csv_text, load_all
from esg_dashboard.data.prices import records_to_frame
from esg_dashboard.ui.components.formatting import format_number
from esg_dashboard.ui.layout import setup_page, sidebar_filters_ui
from esg_dashboard.ui.pages import (
    overview,
    companies,
    company_detail,
    price_history,
    data_quality,
)
from esg_dashboard.ui.pages.context import PageContext

logger = logging.getLogger("esg_dashboard.app")

PAGE_RENDERERS = {
    "overview": overview.render,
    "companies": companies.render,
    "company_detail": company_detail.render,
    "price_history": price_history.render,
    "data_quality": data_quality.render,
}


def _active_filter_summary(filters: FilterState, total_rows: int) -> None:
    badges = []
    if filters.selected_sectors:
        badges.append("Sectors: " + ", ".join(filters.selected_sectors[:3]) + ("…" if len(filters.selected_sectors) > 3 else ""))
    if filters.selected_industries:
        badges.append("Industries: " + ", ".join(filters.selected_industries[:3]) + ("…" if len(filters.selected_industries) > 3 else ""))
    if filters.selected_companies:
        badges.append("Companies: " + ", ".join(filters.selected_companies[:5]) + ("…" if len(filters.selected_companies) > 5 else ""))
    if filters.location_filter:
        badges.append("Locations: " + ", ".join(filters.location_filter))
    if filters.data_availability_filter:
        badges.append("Availability: " + ", ".join(filters.data_availability_filter))
    low, high = filters.esg_score_range
    if (low, high) != (0.0, 100.0):
        badges.append(f"ESG Score: {format_number(low, 0)}–{format_number(high, 0)}")
    start, end = filters.time_range
    if start is not None and end is not None:
        badges.append(f"Prices: {start:%Y-%m-%d} – {end:%Y-%m-%d}")

    summary_text = "Active Filters: " + " | ".join(badges) if badges else "Active Filters: All data"
    st.markdown(f"**{summary_text}**")
    st.caption(f"Showing {format_number(total_rows, 0)} companies after filters.")


def _ensure_loaded(settings: Settings, force: bool) -> None:
    if force:
        logger.info("Refreshing data from %s and %s", settings.esg_data_source, settings.price_data_source)
        cached_fetch_csv_text.clear()  # type: ignore[attr-defined]
        store.price_series.reset()
    if force or not st.session_state.get("esg_data_loaded"):
        load_all(settings.esg_data_source, settings.price_data_source, fetcher=cached_fetch_csv_text)
        st.session_state["esg_data_loaded"] = True


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    setup_page()
    st.title("S&P 500 ESG Explorer")

    refresh = st.sidebar.button("🔄 Refresh Data")
    _ensure_loaded(settings, force=refresh)

    company_records = store.companies.get()
    companies_df = companies_to_frame(company_records)
    price_df = records_to_frame(store.price_data.get())

    filters = sidebar_filters_ui(companies_df, price_dates=price_df.get("date"))
    store.filter_state.set(filters)
    filtered_df = apply_filters(companies_df, filters)
    st.session_state["esg_active_filters"] = serialize_filters(filters)

    prev_count = st.session_state.get("esg_prev_filtered_count")
    current_count = len(filtered_df)
    if prev_count is not None and prev_count != current_count:
        st.toast(f"Filters applied to {current_count:,} companies", icon="🔎")
    st.session_state["esg_prev_filtered_count"] = current_count

    context = PageContext(
        companies=company_records,
        companies_df=companies_df,
        price_df=price_df,
        filters=filters,
        diagnostics=store.diagnostics.get(),
    )

    if companies_df.empty:
        st.warning("No company data loaded. Check that the ESG data file is available.")
        data_quality.render(filtered_df, context)
        return

    _active_filter_summary(filters, current_count)

    tab_labels = [tab.label for tab in TABS]
    streamlit_tabs = st.tabs(tab_labels)

    for streamlit_tab, tab_config in zip(streamlit_tabs, TABS):
        renderer = PAGE_RENDERERS.get(tab_config.key)
        if renderer is None:
            continue
        with streamlit_tab:
            renderer(filtered_df, context)


if __name__ == "__main__":
    main()
