"""
HTTP relay for pypistats.org download statistics.

The service fetches recent download counts for a package, keeps them in an
in-process cache for a few hours, and serves them to the pypi.org frontend.
"""
