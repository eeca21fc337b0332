"""Routing — template compilation, newest-first matching, and handler binding.

Routes are appended to a RouteTable during setup; the Router scans it on
every request and never caches compiled patterns.
"""
