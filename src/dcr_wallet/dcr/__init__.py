"""Decred protocol primitives — network parameters, addresses, scripts, transactions."""
