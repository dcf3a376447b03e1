"""
Contracts (data models).

This folder defines the request/response shapes for the STK push backend:
- the push request body
- the raw gateway reply (HTTP status + JSON body)
- the provider status values reported while polling

Why this exists:
- Ensures consistent data structures across mock and real clients
- Prevents "guessing" payload formats in multiple places

Both mock and real HTTP clients should use these contracts.
"""
