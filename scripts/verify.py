"""
Sales Report Verification Script

Checks an exported daily sales workbook for internal consistency.
Run from project root: python scripts/verify.py [--date YYYY-MM-DD]

Author: Khalil Bannouri
Version: 1.0.0
"""

import argparse
import os
import sys
from datetime import date, datetime

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bistro.services.excel_manager import ExcelManager


def verify_report(day: date) -> bool:
    """Verify one day's exported report."""

    path = ExcelManager.report_path(day)

    print("=" * 60)
    print("🔍 SALES REPORT VERIFICATION")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📄 File: {path}")
    print("=" * 60)

    sheets = ExcelManager.load_sales_report(day)
    if not sheets:
        print("\n❌ Report not found or unreadable!")
        print("   Export it first: python scripts/simulate.py --export")
        return False

    print("\n✅ File loaded successfully!")

    missing = [
        name for name in (
            ExcelManager.SUMMARY_SHEET,
            ExcelManager.TOP_PRODUCTS_SHEET,
            ExcelManager.HOURLY_SHEET,
            ExcelManager.ORDERS_SHEET,
        )
        if name not in sheets
    ]
    if missing:
        print(f"\n⚠️ Missing Sheets: {missing}")
        return False

    summary = dict(zip(sheets[ExcelManager.SUMMARY_SHEET]["metric"], sheets[ExcelManager.SUMMARY_SHEET]["value"]))
    orders = sheets[ExcelManager.ORDERS_SHEET]
    hourly = sheets[ExcelManager.HOURLY_SHEET]

    ok = True

    # Order count
    reported_orders = int(summary["Total Orders"])
    print("\n📊 STATISTICS:")
    print(f"   Orders (summary): {reported_orders}")
    print(f"   Orders (rows): {len(orders)}")
    if reported_orders != len(orders):
        print("   ⚠️ Order count mismatch!")
        ok = False

    # Duplicates
    duplicates = orders["order_id"].duplicated().sum()
    if duplicates > 0:
        print(f"\n⚠️ {duplicates} duplicate order IDs found!")
        ok = False
    else:
        print("✅ No duplicate order IDs")

    # Revenue
    reported_revenue = round(float(summary["Total Revenue"]), 2)
    rows_revenue = round(float(orders["total"].sum()), 2)
    hourly_revenue = round(float(hourly["revenue"].sum()), 2)
    print("\n💰 REVENUE:")
    print(f"   Summary: ${reported_revenue:.2f}")
    print(f"   Orders sheet: ${rows_revenue:.2f}")
    print(f"   Hourly sheet: ${hourly_revenue:.2f}")
    if not reported_revenue == rows_revenue == hourly_revenue:
        print("   ⚠️ Revenue mismatch!")
        ok = False

    # Sample data
    print("\n📋 LATEST ORDERS:")
    print("-" * 60)
    if len(orders) > 0:
        print(orders.head(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE" if ok else "❌ VERIFICATION FAILED")
    print("=" * 60)

    return ok


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sales Report Verification Script")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=date.today(),
        help="Report day (YYYY-MM-DD), defaults to today",
    )
    args = parser.parse_args()

    sys.exit(0 if verify_report(args.date) else 1)
