"""
Data layer: fetching, parsing, normalising, and holding ESG and price records.
"""
