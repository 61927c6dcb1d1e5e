"""Team formation engine.

Sub-modules:
- compatibility – pairwise participant affinity and the cached lookup map
- team_metrics  – diversity & balance scoring for a member set
- pool          – shared, lock-guarded pool of unassigned participants
- formation     – leader selection, candidate scoring, per-team greedy fill
- coordinator   – thread-pool scheduling, timeouts, cancellation, shutdown
- statistics    – aggregate scores across a formation run
"""
