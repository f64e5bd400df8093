"""
Deal Risk - Deal Risk Scoring Engine

A FastAPI-based microservice that turns deal payment history into a
normalized 0-100 risk score, a risk band, and an auditable history of
score transitions.
"""

__version__ = "0.1.0"
