"""
Admin review surface: pending queue and submission detail.
"""
