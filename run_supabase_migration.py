#!/usr/bin/env python3
"""Check the tables the activation engine reads and writes, using the Supabase client."""
import sys
from pathlib import Path

sys.path.insert(0, '.')

from activation_engine.db.supabase_client import get_supabase

# table -> columns the engine selects
REQUIRED_TABLES = {
    "user_daily_plans": "user_id, date, required_actions, completed_actions",
    "cadence_cycles": "cycle_id, cadence_day, updated_at",
    "users": "id, onboarding_status, access_level, role",
    "contacts": "id, user_id, name, pipeline_stage, last_activity_at",
    "action_recommendations": "id, user_id, date, context, recommendation, status",
}

OWNED_MIGRATION = Path(__file__).parent / "migrations" / "0001_action_recommendations.sql"


def run_migration():
    supabase = get_supabase()
    missing = []

    for table, columns in REQUIRED_TABLES.items():
        print(f"🔍 Checking {table}...")
        try:
            supabase.table(table).select(columns).limit(1).execute()
            print(f"✅ {table} ok")
        except Exception as e:
            print(f"❌ {table}: {e}")
            missing.append(table)

    if not missing:
        print("✅ All tables present")
        return

    if "action_recommendations" in missing:
        print("💡 Run this SQL in your Supabase SQL editor:")
        print(OWNED_MIGRATION.read_text())

    others = [t for t in missing if t != "action_recommendations"]
    if others:
        print(f"💡 Owned by other services, check their migrations: {', '.join(others)}")
    sys.exit(1)


if __name__ == "__main__":
    run_migration()
