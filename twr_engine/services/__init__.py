# twr_engine/services/__init__.py
"""
Service layer for the TWR engine.

Architecture:
    services/
    ├── constants.py       # Business constants
    ├── exceptions.py      # ServiceError hierarchy (no HTTP knowledge)
    ├── protocols.py       # External data provider interfaces
    ├── valuation/         # Daily valuation series and cash reconstruction
    ├── cashflows/         # Ledger classification and axis snapping
    ├── analytics/         # TWR, statistics, benchmarks, orchestration
    └── aggregation/       # Multi-entity (multi-portfolio) combination

Subpackages are imported explicitly by their users; this module stays empty
so that importing constants never drags in the calculation layer.
"""
