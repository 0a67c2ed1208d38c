"""
Core package for the ESG ratings dashboard.

Submodules provide CSV loading, record normalisation, reactive stores,
filtering, and the Streamlit user interface orchestrated by `app.py`.
"""
