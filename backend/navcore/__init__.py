"""Core logic for NAV tracking: calendar, series maths, signals and repair.

This package contains pure business logic with no I/O of its own
(no database, HTTP or SMTP access). Collaborators are injected through
the protocols in navcore.protocol and implemented by navtracker/.
"""
