"""Routing: path patterns and the compiled route registry.

Routes are registered during setup and sorted once, most specific first,
when the filesystem freezes. Resolution never re-sorts.
"""
