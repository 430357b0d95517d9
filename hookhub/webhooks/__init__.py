"""GitHub webhook intake: signature gate, transformer and HTTP server."""
