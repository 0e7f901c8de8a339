"""Unit tests for Tax Scanner web route modules.

Testing pattern:
    - Build a bare FastAPI app with the router under test
    - Replace database, resolver and geocoder dependencies through
      app.dependency_overrides
    - Check status codes and the {"error": ...} body for failures
"""
