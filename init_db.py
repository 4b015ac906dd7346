#!/usr/bin/env python3
"""
Database initialization script for Examly
Prints the CREATE TABLE statements for the Supabase PostgreSQL schema
and checks that the configured project is reachable.
"""

import sys

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable

from examly.database import Database, check_supabase_connection, get_supabase_admin_client
from examly.models import Base

def schema_sql() -> str:
    """DDL for every table, parents before children"""
    statements = []
    for table in Base.metadata.sorted_tables:
        ddl = str(CreateTable(table).compile(dialect=postgresql.dialect())).strip()
        statements.append(f"{ddl};")
    return "\n\n".join(statements)

def init_supabase():
    """Test Supabase connection and print the schema to apply"""
    print(schema_sql())

    try:
        print("\n-- Testing Supabase connection...", file=sys.stderr)
        db = Database(get_supabase_admin_client())

        if check_supabase_connection(db):
            print("-- Supabase connection successful", file=sys.stderr)
        else:
            print("-- Supabase connection failed; run the SQL above in the SQL editor first", file=sys.stderr)
            return False

        return True

    except Exception as e:
        print(f"-- Error testing Supabase: {e}", file=sys.stderr)
        print("-- Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in your .env file", file=sys.stderr)
        return False

if __name__ == "__main__":
    if "--sql-only" in sys.argv:
        print(schema_sql())
        sys.exit(0)

    sys.exit(0 if init_supabase() else 1)
