"""
revstamp - revision stamping for builds.

Queries a Git working directory for the checked out revision and renders
it through a small format language ("{!}{commit:8}-{date}") into a
version string, including compact time codes relative to a base year.
"""

__version__ = "1.0.0"
