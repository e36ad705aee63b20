"""
Real HTTP integration clients.

These clients communicate with real external systems via HTTP:
- Finvu AA network (clients/real_http/finvu.py)

Important:
- Must implement the same interface as the mock clients (AANetworkClient)
- Must return data that src/integrations/policy/response_wrappers.py can normalize

Switching:
The selection of mock vs real clients should happen in src/api/main.py only.
"""
