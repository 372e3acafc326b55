"""
Chain - Interaction with Ankr chain RPC nodes.

Provides endpoint selection over the replica set, a JSON-RPC client, and
transfer transaction building, signing and submission.

Uses httpx + rfc8785 + cryptography; no chain SDK.
"""
