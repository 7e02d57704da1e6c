# fundfolio/__init__.py
"""
FundFolio - mutual-fund portfolio ingestion, reconciliation and allocation
analysis.
"""

__version__ = "0.1.0"
