"""Business logic: credentials, sessions, ledger and account registration."""
