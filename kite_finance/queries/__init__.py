"""Monthly aggregate queries."""

from kite_finance.queries.aggregates import MonthlyAggregates

__all__ = ["MonthlyAggregates"]
