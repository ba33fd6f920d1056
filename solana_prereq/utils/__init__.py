"""Shared utilities for the Solana prerequisite toolkit."""
