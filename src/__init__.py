"""
Customs Valuation System - Source Package.

This package contains all core modules for computing the customs value
to declare ("Valeur à Déclarer") of an extracted commercial invoice.
Each module has a single responsibility.

Modules:
    - input_handler: Extraction JSON loading and value normalization
    - postprocessor: Invoice consistency validation
    - valuation: Regime grouping, HS aggregation and cost apportionment
    - output_handler: JSON, Excel and text summary output
    - utils: Logging, exceptions and helpers

Architecture:
    Extraction JSON → Input → Validation → Valuation → Output
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'input_handler',
    'postprocessor',
    'valuation',
    'output_handler',
    'utils'
]
