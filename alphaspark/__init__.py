"""
AlphaSpark backend package.

This package provides a FastAPI application that serves broadcast questions
and group-scoped responses/comments out of Cloud Firestore, behind a signed
session cookie.
"""
