"""
CLI command modules.
"""

from apcd_cli.commands import criteria, evaluate, fees, simulate

__all__ = ["criteria", "evaluate", "fees", "simulate"]
