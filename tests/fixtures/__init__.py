"""
Test fixtures package for the empanelment engine tests.

This package provides factory functions for creating test objects.
- common.py: actors, snapshots, rubric/context, score batches, lifecycle driver

Usage:
    from fixtures import make_application, drive

    def test_something():
        app = drive(ApplicationStatus.UNDER_EVALUATION, scores=scores_totalling(48))
"""

from .common import (
    APPLICANT,
    EVALUATOR,
    FIXED_TIME,
    MANDATORY_IDS,
    OFFICER,
    OPTIONAL_ID,
    SYSTEM,
    VERIFIER,
    drive,
    make_actor,
    make_application,
    make_context,
    make_findings,
    make_registry,
    scores_totalling,
)

__all__ = [
    "APPLICANT",
    "EVALUATOR",
    "FIXED_TIME",
    "MANDATORY_IDS",
    "OFFICER",
    "OPTIONAL_ID",
    "SYSTEM",
    "VERIFIER",
    "drive",
    "make_actor",
    "make_application",
    "make_context",
    "make_findings",
    "make_registry",
    "scores_totalling",
]
