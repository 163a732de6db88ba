"""Pricing catalog: storage, access layer, and rebate rules.

The catalog is a single versioned JSON document. All reads and writes go
through ``CatalogService``; rebate formulas in ``rebates`` are pure.
"""
