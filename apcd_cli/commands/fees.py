"""
CLI Fees Command

Usage:
    apcd fees --types 5 [--discount] [--json]
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace

from core.fees import FeeCalculation, calculate_application_fees


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def _format_inr(amount: int) -> str:
    # Indian digit grouping: 350000 -> 3,50,000
    digits = str(amount)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def _print_line(name: str, line: FeeCalculation) -> None:
    print(f"{name}: {line.quantity} x {_format_inr(line.base_amount)} = {_format_inr(line.subtotal)}")
    if line.discount_amount:
        print(f"  discount {line.discount_percent}%: -{_format_inr(line.discount_amount)}")
    print(f"  GST {line.gst_rate}%: +{_format_inr(line.gst_amount)}")
    print(f"  total: {_format_inr(line.total_amount)}")


def fees_cmd(args: Namespace) -> int:
    """Execute the fees command."""
    if args.types < 0:
        print("Error: --types must be non-negative", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    config = getattr(args, "runtime_config", None)
    quote = calculate_application_fees(
        args.types,
        discount_eligible=args.discount,
        fees=config.fees if config else None,
    )

    if args.json:
        print(json.dumps(quote.model_dump(mode="json"), indent=2))
        return EXIT_SUCCESS

    _print_line("application fee", quote.application_fee)
    _print_line("empanelment fee", quote.empanelment_fee)
    print(f"grand total (INR): {_format_inr(quote.grand_total)}")
    return EXIT_SUCCESS
