"""
Posting Kernel - rule resolution and double-entry posting plans.

Given a business event awaiting posting, the kernel:
- Resolves the effective-dated account mapping for the posting date
- Freezes that decision into a canonical, content-hashed snapshot
- Derives balanced ledger lines and cost-allocation rows

Everything is pure and deterministic; persistence belongs to the caller.
"""

__version__ = "0.1.0"
