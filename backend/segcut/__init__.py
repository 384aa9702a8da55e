"""SegCut: timestamp-based video segment editing."""
