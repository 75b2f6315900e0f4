"""Catalog services: tokens, validation, rate limiting and game queries.

Route handlers import from here; nothing in this package depends on the
request object except where a function explicitly takes one.
"""
