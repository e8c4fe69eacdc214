"""Core (UI-agnostic) recruiting dashboard logic.

This package contains:
- data loading (CSV -> pandas, load-once store)
- filter normalization
- record filtering and pathway/city/college aggregation
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
