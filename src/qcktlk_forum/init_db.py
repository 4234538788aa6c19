"""Create every forum table on the configured database."""

from qcktlk_forum.db.session import create_tables

if __name__ == "__main__":
    create_tables()
    print("Database initialized.")
