"""
FAIB Internal Tools.

Renewal pricing, SheepCRM form review and training-provider licence management.
"""

__version__ = "0.1.0"
