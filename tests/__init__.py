"""
Test suite for the MediConnect API.

Integration tests drive the FastAPI app through TestClient against a SQLite
database; unit tests cover the role predicates and token helpers.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
