"""
Example 02: Associations and Eager Loading

This example declares has_many / belongs_to / has_and_belongs_to_many
associations, joins through them and eager loads them with ``include``.
"""

import logging
import sqlite3
import tempfile
from pathlib import Path

from row_record import (
    ConnectionConfig,
    Model,
    belongs_to,
    default_registry,
    has_and_belongs_to_many,
    has_many,
)


class Author(Model):
    associations = [has_many("books", order="book_id")]


class Book(Model):
    associations = [belongs_to("author"), has_and_belongs_to_many("tags")]


class Tag(Model):
    pass


def main():
    # Every statement is logged at DEBUG
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    conn = sqlite3.connect(db_path)
    conn.executescript("""
        CREATE TABLE authors (author_id INTEGER PRIMARY KEY, name TEXT);
        CREATE TABLE books (book_id INTEGER PRIMARY KEY, author_id INTEGER, title TEXT);
        CREATE TABLE tags (tag_id INTEGER PRIMARY KEY, name TEXT);
        CREATE TABLE books_tags (book_id INTEGER, tag_id INTEGER);

        INSERT INTO authors (name) VALUES ('Le Guin'), ('Pratchett');
        INSERT INTO books (author_id, title) VALUES
            (1, 'The Dispossessed'), (1, 'The Lathe of Heaven'), (2, 'Mort');
        INSERT INTO tags (name) VALUES ('classic'), ('comic');
        INSERT INTO books_tags VALUES (1, 1), (2, 1), (3, 2);
    """)
    conn.close()

    default_registry.connections.add(
        "default", ConnectionConfig(driver="sqlite", database=db_path, pool_size=1)
    )

    print("=== Eager loading: one query per relationship ===\n")
    for author in Author.all({"include": ["books"], "order": "name"}):
        print(f"{author.name}: {[book.title for book in author.books]}")
    print()

    print("=== has_and_belongs_to_many ===\n")
    for book in Book.all({"include": ["tags", "author"]}):
        print(f"{book.title} by {book.author.name}: {[tag.name for tag in book.tags]}")
    print()

    print("=== Joining through an association ===\n")
    comic = Author.all({"joins": ["books"], "conditions": ["books.title = ?", "Mort"]})
    print(f"author of Mort: {comic[0].name}")

    default_registry.connections.clear()
    default_registry.clear()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
