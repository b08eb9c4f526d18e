"""
Core domain models, fixed-point math primitives, and boundary contracts.

This module contains the foundational building blocks that are independent
of external systems (chain RPC, indexers, IPFS, UI).
"""
