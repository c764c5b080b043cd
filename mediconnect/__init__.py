"""
MediConnect API

A FastAPI backend coordinating patients, doctors and administrators:
authentication, role-gated profiles, appointment booking without double
booking, and health records.
"""

__version__ = "1.0.0"
