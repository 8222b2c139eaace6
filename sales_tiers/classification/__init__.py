"""
Classification engine: pure functions that turn validated sales records
into ranked S/A/B/C tiers.

Modules
-------
engine : aggregate_records() + rank_groups() + compute_cutoffs()
         + assign_tier() + classify() — no I/O, no DB, never raises.
"""
