"""
Example 01: Models and Finders

This example declares a model over an existing SQLite table and queries it
with find, all, first/last and find_by.
"""

import sqlite3
import tempfile
from pathlib import Path

from row_record import ConnectionConfig, Model, default_registry


class User(Model):
    pass


def main():
    # Create a temporary database
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.execute("""
        CREATE TABLE users (
            user_id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1
        )
    """)
    conn.execute("INSERT INTO users (name, email) VALUES ('Alice', 'alice@example.com')")
    conn.execute("INSERT INTO users (name, email) VALUES ('Bob', 'bob@example.com')")
    conn.execute("INSERT INTO users (name, email, active) VALUES ('Charlie', 'charlie@example.com', 0)")
    conn.commit()
    conn.close()

    # Models use the "default" connection unless they name another one
    default_registry.connections.add(
        "default", ConnectionConfig(driver="sqlite", database=db_path, pool_size=1)
    )

    print("=== Finders ===\n")

    user = User.find(1)
    print(f"find(1): {user}")

    users = User.all({"conditions": {"active": 1}, "order": "name"})
    print(f"all active ({len(users)} rows):")
    for user in users:
        print(f"  - {user.name} ({user.email})")
    print()

    print(f"first by name: {User.first({'order': 'name'}).name}")
    print(f"last by name:  {User.last({'order': 'name'}).name}")

    bob = User.find_by("name_and_active", "Bob", 1)
    print(f"find_by name_and_active: {bob.email}\n")

    # Create and update
    dave = User.create(name="Dave", email="dave@example.com")
    print(f"created user_id={dave.user_id}")
    dave.update_attribute("email", "dave@example.org")
    print(f"reloaded email: {User.find(dave.user_id).email}")

    # Clean up
    default_registry.connections.clear()
    default_registry.clear()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
