"""
fintrack - Source Package

Calculation core for a small-team finance tracker: shared-expense
balances, multi-currency conversion and VAT reporting.

DESIGN PRINCIPLES:
1. Amounts never travel without their currency
2. Fail loudly on missing table entries
3. Edits are reverse-then-reapply, never diffs
4. Every mutation is auditable
5. Storage is injected, never ambient
"""

__version__ = "1.0.0"
__author__ = "fintrack Team"
