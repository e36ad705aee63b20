"""
Finvu AA consent orchestration.

- envelope.py:        request envelope builder ({header, body})
- token_service.py:   per-call login
- session_service.py: session store reads (and maintenance writes)
- field_resolvers.py: fallback chains for verify fields
- consent_service.py: generate / verify flows
- errors.py:          error taxonomy
"""
