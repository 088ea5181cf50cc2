"""Kodbank API: registration, cookie sessions and an append-only ledger."""
