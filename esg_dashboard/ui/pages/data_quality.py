from __future__ import annotations

import pandas as pd
import streamlit as st

from esg_dashboard.ui.components.kpi import KpiCard, render_kpi_cards
from esg_dashboard.ui.pages.context import PageContext


def _percentage_unreported(series: pd.Series) -> float:
    total = len(series)
    if total == 0:
        return 0.0
    numeric = pd.to_numeric(series, errors="coerce")
    return float(((numeric.isna()) | (numeric == 0)).sum() / total * 100)


def _report_cards(label: str, report: dict) -> list[KpiCard]:
    return [
        KpiCard(label=f"{label} Rows Read", value=float(report.get("source_rows", 0))),
        KpiCard(label=f"{label} Rows Parsed", value=float(report.get("parsed_rows", 0))),
        KpiCard(label=f"{label} Rows Skipped", value=float(report.get("skipped_rows", 0))),
        KpiCard(label=f"{label} Duplicates", value=float(report.get("duplicate_rows", 0))),
    ]


def _render_report(label: str, report: dict | None) -> None:
    st.markdown(f"#### {label} File")
    if not report:
        st.info(f"{label} data has not been loaded.")
        return
    st.caption(f"Source: `{report.get('source', '–')}`")
    if report.get("error"):
        st.error(f"Load failed: {report['error']}")
    render_kpi_cards(_report_cards(label, report), columns=4)
    missing = report.get("missing_fields") or []
    if missing:
        st.write("Fields not found in header (defaulted): " + ", ".join(f"`{m}`" for m in missing))
    row_errors = report.get("row_errors") or []
    if row_errors:
        with st.expander(f"Dropped rows ({len(row_errors)} shown)"):
            for message in row_errors:
                st.write(f"- {message}")


def render(df: pd.DataFrame, context: PageContext) -> None:
    st.subheader("Data Quality & Definitions")

    _render_report("Company", context.diagnostics.get("companies"))
    _render_report("Price", context.diagnostics.get("prices"))

    if not context.companies_df.empty:
        st.markdown("#### Score Coverage")
        cards = [
            KpiCard(
                label=label,
                display=f"{_percentage_unreported(context.companies_df[col]):.1f}% unreported",
            )
            for col, label in (
                ("total_esg_score", "Total ESG"),
                ("environmental_score", "Environmental"),
                ("social_score", "Social"),
                ("governance_score", "Governance"),
            )
            if col in context.companies_df
        ]
        render_kpi_cards(cards, columns=4)

    st.markdown("#### Metric Definitions")
    st.write(
        """
        - **Total ESG Score**: Composite environmental, social and governance rating for the company.
        - **Pillar Score / Mean / Max**: Company score for the pillar next to its industry mean and maximum.
        - **Percentile**: Rank of the total score within the rated universe.
        - **Change over Range**: Percent change in closing price between the first and last day inside the selected time range.
        """
    )

    st.markdown("#### Current Assumptions")
    st.write(
        """
        - Unparsable numeric values load as 0 and are treated as "not reported" in averages and charts.
        - Rows that cannot be parsed are dropped; the rest of the file still loads.
        - Prices are daily closes from the wide-format price file; blank cells are skipped.
        """
    )
