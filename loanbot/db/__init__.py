"""Row-store access backed by Postgres."""
