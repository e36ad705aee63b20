"""
Integrations layer.
This package contains all code used to communicate with external systems:
- Finvu AA network (login, consent request, LSP consent encryption)
- The session store shared with the loan-origination workflow

Key rule:
- HTTP handlers MUST NOT call external APIs directly.
- Handlers call services under src/integrations/finvu, which use the clients
  under src/integrations/clients.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (src/api/main.py).
"""

from .contracts.finvu import (
    AANetworkClient,
    ConsentGenerateRequest,
    ConsentGenerateResponse,
    ConsentPurpose,
    ConsentVerifyRequest,
    ConsentVerifyResponse,
    RequestEnvelope,
)
from .contracts.session import FormData, LoanProductForm, SessionRecord

__all__ = [
    # finvu
    "AANetworkClient", "ConsentGenerateRequest", "ConsentGenerateResponse",
    "ConsentPurpose", "ConsentVerifyRequest", "ConsentVerifyResponse",
    "RequestEnvelope",
    # session
    "FormData", "LoanProductForm", "SessionRecord",
]
