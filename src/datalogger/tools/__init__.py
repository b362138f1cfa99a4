"""Developer tooling: opt-in debug and timing hooks."""
