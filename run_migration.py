#!/usr/bin/env python3
"""Apply a SQL migration file to the Supabase Postgres database."""
import os
import sys

DEFAULT_MIGRATION = "migrations/0001_braintok_schema.sql"

migration_file = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_MIGRATION
with open(migration_file, "r") as f:
    sql = f.read()

print(f"Migration file: {migration_file} ({len(sql)} bytes)")

database_url = os.getenv("DATABASE_URL")
if not database_url:
    print("DATABASE_URL environment variable not set")
    print("\nRun this SQL in the Supabase SQL editor instead:\n")
    print(sql)
    sys.exit(1)

try:
    import psycopg2
except ImportError:
    print("psycopg2 not installed. Install with: pip install psycopg2-binary")
    sys.exit(1)

try:
    conn = psycopg2.connect(database_url)
    with conn, conn.cursor() as cursor:
        cursor.execute(sql)
    conn.close()
except Exception as e:
    print(f"Error running migration: {e}")
    sys.exit(1)

print("Migration complete")
