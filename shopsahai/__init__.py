"""
Shop Sahai Voice - Source Package

The voice command engine of a small-shop bookkeeping assistant.
Turns decoded speech transcripts (English or Malayalam) into validated
income, expense, purchase and borrow records.

DESIGN PRINCIPLES:
1. Speech suggests → Validation gates → Persistence
2. Fail early, fail visibly
3. No silent defaults (an amount we could not hear is never zero)
4. Every step must be auditable
5. Storage and speech layers are swappable
"""

__version__ = "1.0.0"
__author__ = "Shop Sahai Team"
