# twr_engine/schemas/__init__.py
"""
Pydantic schemas for the HTTP layer and for raw ledger rows.

Modules:
    analytics.py   Performance request/response
    entities.py    Multi-entity snapshot request/combined response
    cashflows.py   One raw ledger row (used by the cashflow classifier)
    errors.py      Error response bodies

Import from the modules directly; this package does not re-export, because
cashflows.py is imported by the service layer.
"""
