"""Infrastructure adapters: persistence, security, push transport and scheduling."""
