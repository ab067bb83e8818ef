"""Attribute predicate filtering for resource records."""
