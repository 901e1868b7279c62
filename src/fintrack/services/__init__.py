"""Query, aggregation and authentication services."""
