"""
FastAPI service for skillswap.

Provides REST API for:
- GET /skill-scores - The caller's per-skill scores
- GET /users/{user_id}/credibility - Credibility dashboard
- POST /sessions/{id}/complete, /sessions/{id}/feedback,
  /assignments/{id}/grade - Scoring triggers
- GET /health - Service health check
"""

from skillswap.api.app import create_app

__all__ = ["create_app"]
