"""
Contracts (data models).

This folder defines the request/response shapes for external integrations:
- Finvu AA envelopes and consent request/response formats
- Session records written by the upstream loan-origination workflow

Why this exists:
- Ensures consistent data structures across mock and real clients
- Prevents "guessing" payload formats in multiple places

Both mock and real HTTP clients should use these contracts.
"""
