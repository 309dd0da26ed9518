"""
Admin dashboard for the Trackutem bus-tracking app.

This package provides a FastAPI application with screens and a JSON API
over Firebase (Auth, Firestore, Realtime Database, Cloud Storage), plus
in-memory stand-ins for local development and tests.
"""
