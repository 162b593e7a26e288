"""HTTP service over the aggregation engine."""
