# twr_engine/__init__.py
"""
Portfolio TWR & Statistics Engine.

Turns per-instrument price histories, a cash ledger and optional benchmark
prices into a daily valuation series, cashflow-adjusted daily returns and
the derived statistics shown on a portfolio statistics page.

Subpackages:
    services/   Pure calculation layer (valuation, cashflows, analytics, aggregation)
    schemas/    Pydantic request/response models for the HTTP layer
    routers/    FastAPI routers
    utils/      Logging, request context and date helpers
"""

__version__ = "0.1.0"
