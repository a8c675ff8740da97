"""LLM chat relay: completion proxy (server) and send controller (client)."""
