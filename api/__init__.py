"""
APCD Empanelment API (FastAPI)

HTTP surface over the evaluation and status-transition engine:
- GET /criteria, /device-types - Rubric and catalogue
- POST /applications - Open a DRAFT application
- POST /applications/{id}/events - Apply one lifecycle event
- GET /applications/{id}/evaluation - Score preview
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
