#!/usr/bin/env python3
"""
Database initialization script for the Class Quiz API
Writes the table DDL to create_tables.sql for the Supabase SQL editor
and checks the Supabase connection
"""

import sys
import os

# Add the app directory to the Python path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy.dialects import postgresql
from sqlalchemy.schema import CreateTable
from app.database import Base, test_supabase_connection
from app.config import settings
import app.models  # noqa: F401  registers the tables on Base.metadata

SQL_FILE = "create_tables.sql"

def render_ddl() -> str:
    """CREATE TABLE statements for every model, in dependency order"""
    dialect = postgresql.dialect()
    statements = [
        str(CreateTable(table).compile(dialect=dialect)).strip() + ";"
        for table in Base.metadata.sorted_tables
    ]
    return "\n\n".join(statements) + "\n"

def init_supabase():
    """Write the schema SQL and test the Supabase connection"""
    with open(SQL_FILE, "w", encoding="utf-8") as f:
        f.write(render_ddl())
    print(f"Schema written to {SQL_FILE}")

    if not settings.supabase_url:
        print("SUPABASE_URL is not set, skipping the connection test")
        return True

    print("Testing Supabase connection...")
    if test_supabase_connection():
        print("Supabase connection successful")
    else:
        print("Supabase connection test failed (tables may not exist yet)")

    print("\nNext steps:")
    print(f"1. Run {SQL_FILE} in the Supabase SQL editor")
    print(f"2. Create a public storage bucket named '{settings.storage_bucket}'")
    print("3. Give admin accounts user_metadata.role = 'admin' or list them in ADMIN_EMAILS")
    return True

if __name__ == "__main__":
    success = init_supabase()
    sys.exit(0 if success else 1)
