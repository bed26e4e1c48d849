"""
Donation drive backend: campaign ledger, transparency statistics,
donor-gated comments and subscriber notifications.
"""
__version__ = "1.0.0"
