"""Catalog search-and-rank engine with a time-bounded result cache."""
