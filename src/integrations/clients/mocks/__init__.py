"""
Mock integration clients.

These clients return fake (but realistic) responses without calling any external API.
They are used when:
- Finvu UAT credentials are not available
- We want to test the consent flows end-to-end without external dependencies

Important:
- Mock clients must follow the SAME interface as real HTTP clients.

Switching to real:
Set INTEGRATIONS_MODE=real (the default) so src/api/main.py wires
clients/real_http/* implementations instead.
"""
