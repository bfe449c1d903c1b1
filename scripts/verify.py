"""
Order History Verification Script

Checks the Excel order history written by the Celery export task.
Run from project root: python scripts/verify.py
"""

import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pandas as pd

from app.services.excel_manager import ExcelManager

FINAL_STATUSES = {"completed", "rejected"}


def verify_history() -> bool:
    """Verify the history workbook after a simulation run."""
    manager = ExcelManager()

    print("=" * 60)
    print("ORDER HISTORY VERIFICATION")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"File: {manager.path}")
    print("=" * 60)

    if not manager.path.exists():
        print("\n❌ History workbook not found!")
        print("   Finish some orders first: python scripts/simulate.py")
        return False

    try:
        df = pd.read_excel(manager.path, engine="openpyxl")
    except Exception as e:
        print(f"\n❌ Could not read workbook: {e}")
        return False

    ok = True
    print(f"\nRows: {len(df)}")

    missing = [col for col in ExcelManager.ORDER_COLUMNS if col not in df.columns]
    if missing:
        print(f"⚠️ Missing columns: {missing}")
        ok = False
    else:
        print("✅ All columns present")

    duplicates = int(df["order_id"].duplicated().sum()) if "order_id" in df.columns else 0
    if duplicates:
        print(f"⚠️ {duplicates} duplicate order ids")
        ok = False
    else:
        print("✅ No duplicate order ids")

    if "status" in df.columns:
        unfinished = df[~df["status"].isin(FINAL_STATUSES)]
        if len(unfinished):
            print(f"⚠️ {len(unfinished)} rows are not completed/rejected")
            ok = False
        print(f"\nBy status:\n{df['status'].value_counts().to_string()}")

    if {"status", "rejection_reason"} <= set(df.columns):
        rejected = df[df["status"] == "rejected"]
        no_reason = rejected["rejection_reason"].isna().sum()
        if no_reason:
            print(f"⚠️ {no_reason} rejected orders without a reason")
            ok = False

    if {"status", "completion_time"} <= set(df.columns):
        completed = df[df["status"] == "completed"]
        if len(completed):
            print(f"\nAverage completion time: {completed['completion_time'].mean():.1f} min")

    if "total" in df.columns:
        print(f"Revenue (all exported orders): ${df['total'].sum():.2f}")

    print("\n" + "=" * 60)
    print("✅ VERIFICATION PASSED" if ok else "❌ VERIFICATION FOUND PROBLEMS")
    print("=" * 60)
    return ok


if __name__ == "__main__":
    sys.exit(0 if verify_history() else 1)
