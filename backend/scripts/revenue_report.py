#!/usr/bin/env python3
import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from servicehub.services.marketplace_store import marketplace_store  # noqa: E402


def build_report(provider_id: Optional[str] = None, top: int = 5) -> Dict[str, Any]:
    if provider_id:
        revenue = marketplace_store.provider_revenue(provider_id)
        rows = revenue["recent_transactions"]
        totals = revenue["totals"]
        by_month = revenue["by_month"]
        breakdown = revenue["by_service"]
    else:
        revenue = marketplace_store.admin_revenue()
        rows = revenue["top_transactions"]
        totals = revenue["totals"]
        by_month = revenue["by_month"]
        breakdown = revenue["by_provider"]
    return {
        "scope": provider_id or "platform",
        "totals": totals,
        "by_month": by_month,
        "breakdown": breakdown[:top],
        "transactions": [
            {
                "appointment_id": apt.id,
                "service": apt.service.name if apt.service else None,
                "total_amount": apt.total_amount,
                "commission_amount": apt.commission_amount,
            }
            for apt in rows[:top]
        ],
    }


def print_human(report: Dict[str, Any]) -> None:
    print(f"Revenue report ({report['scope']})")
    for key, value in report["totals"].items():
        print(f"  {key}: {value}")
    print("By month:")
    for row in report["by_month"]:
        print(f"  - {row['month']}: gross={row['gross']:.2f} commission={row['commission']:.2f} net={row['net']:.2f}")
    print("Breakdown:")
    for row in report["breakdown"]:
        label = row.get("provider_name") or row.get("service_name")
        print(f"  - {label}: {row['count']} transaction(s)")
    print("Transactions:")
    lines: List[str] = [
        f"  - {tx['appointment_id']} {tx['service']}: {tx['total_amount']:.2f} (commission {tx['commission_amount']:.2f})"
        for tx in report["transactions"]
    ]
    print("\n".join(lines) if lines else "  (none)")


def main() -> int:
    parser = argparse.ArgumentParser(description="Summarize ServiceHub revenue from the seeded marketplace data.")
    parser.add_argument("--provider-id", default="", help="Limit the report to one provider.")
    parser.add_argument("--top", type=int, default=5, help="Rows to show in breakdown and transaction lists.")
    parser.add_argument("--json-out", default="", help="Optional path to write JSON summary.")
    args = parser.parse_args()

    if args.provider_id and marketplace_store.get_user(args.provider_id) is None:
        print(f"Unknown provider: {args.provider_id}", file=sys.stderr)
        return 1

    report = build_report(provider_id=args.provider_id or None, top=max(args.top, 1))
    print_human(report)

    if args.json_out:
        path = Path(args.json_out)
        path.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")
        print(f"Wrote report: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
