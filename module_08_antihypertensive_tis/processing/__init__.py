"""
Module 8 Processing
===================

Turn dispensing records into per-patient Therapeutic Intensity Scores.

- class_flagger: class_<name> indicators
- dose_scorer: per-class TIS from dose / max-dose ratios
- class_aggregator: one TIS_<name> column per configured class
- reshaper: per-patient, per-period totals
- delta_calculator: new minus previous period
"""
