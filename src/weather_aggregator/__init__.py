"""Weather forecast aggregation service."""
