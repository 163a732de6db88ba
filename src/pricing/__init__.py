"""Quote pricing: selection aggregation and illustrative estimates.

Deterministic: same selection and catalog, same result.
"""
