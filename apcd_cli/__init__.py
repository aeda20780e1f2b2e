"""
APCD Empanelment CLI

Command-line interface for the evaluation and status-transition engine.

Usage:
    python -m apcd_cli criteria [--rubric rubric.yaml]
    python -m apcd_cli evaluate snapshot.json
    python -m apcd_cli fees --types 5 --discount
    python -m apcd_cli simulate script.json
    python -m apcd_cli config --show
"""

__version__ = "0.1.0"
