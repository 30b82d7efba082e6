"""District name reconciliation between the upstream service and the roster.

Public API:
    - reconcile_district: Match an upstream district name to one roster entry
    - ReconcileResult: Chosen entry, candidate list and strategy
    - MatchStrategy: Which rule produced the match
"""

from mp_api.lib.reconciler.matcher import MatchStrategy, ReconcileResult, reconcile_district

__all__ = ["MatchStrategy", "ReconcileResult", "reconcile_district"]
