"""
Fallback chains for the consent verification fields.

Each chain is an ordered list of resolver functions. A resolver looks at the
inbound request and the (possibly missing) session and returns a value or
None; the first non-None value wins. Explicit request values always come
first, so session data is only consulted when the caller left a field out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, TypeVar

from src.integrations.contracts.finvu import ConsentVerifyRequest, ResolvedVerifyFields
from src.integrations.contracts.session import (
    ConsumerInformationForm,
    PersonalDetailsInformationForm,
    PersonalLoanInformationForm,
    SessionRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Rendered in the default return URL when the session lacks a value.
MISSING_SESSION_VALUE = "undefined"


@dataclass
class ResolutionContext:
    request: ConsentVerifyRequest
    session: Optional[SessionRecord]
    lsp_id: str
    redirect_url: str
    return_url: str
    customer_id_suffix: str = "@finvu"


Resolver = Callable[[ResolutionContext], Optional[T]]


def resolve_first(resolvers: Sequence[Resolver], ctx: ResolutionContext) -> Optional[T]:
    for resolver in resolvers:
        value = resolver(ctx)
        if value is not None:
            return value
    return None


def _present(value: Optional[str]) -> Optional[str]:
    return value if value else None


# ---------------------------------------------------------------------------
# Contact number
# ---------------------------------------------------------------------------

def _form_contact(kind: str) -> Resolver:
    def resolver(ctx: ResolutionContext) -> Optional[str]:
        if ctx.session is None:
            return None
        form = ctx.session.form_data.get(kind)
        return _present(form.contact_number) if form else None

    resolver.__name__ = f"contact_from_{kind}"
    return resolver


CONTACT_NUMBER_CHAIN: List[Resolver] = [
    _form_contact(PersonalLoanInformationForm.kind),
    _form_contact(ConsumerInformationForm.kind),  # gold loan
    _form_contact(PersonalDetailsInformationForm.kind),
]


def resolve_contact_number(ctx: ResolutionContext) -> Optional[str]:
    return resolve_first(CONTACT_NUMBER_CHAIN, ctx)


# ---------------------------------------------------------------------------
# Customer identifier
# ---------------------------------------------------------------------------

def explicit_user_id(ctx: ResolutionContext) -> Optional[str]:
    return _present(ctx.request.user_id)


def user_id_from_contact_number(ctx: ResolutionContext) -> Optional[str]:
    contact = resolve_contact_number(ctx)
    return f"{contact}{ctx.customer_id_suffix}" if contact else None


CUSTOMER_ID_CHAIN: List[Resolver] = [explicit_user_id, user_id_from_contact_number]


# ---------------------------------------------------------------------------
# Consent handles
# ---------------------------------------------------------------------------

def explicit_consent_handles(ctx: ResolutionContext) -> Optional[List[str]]:
    # An explicitly supplied list wins even when empty.
    handles = ctx.request.consent_handles
    return list(handles) if handles is not None else None


def consent_handles_from_session(ctx: ResolutionContext) -> Optional[List[str]]:
    if ctx.session is None or not ctx.session.consent_handler:
        return None
    return [ctx.session.consent_handler]


CONSENT_HANDLES_CHAIN: List[Resolver] = [explicit_consent_handles, consent_handles_from_session]


# ---------------------------------------------------------------------------
# Return / redirect URLs and LSP id
# ---------------------------------------------------------------------------

def explicit_return_url(ctx: ResolutionContext) -> Optional[str]:
    return _present(ctx.request.return_url)


def default_return_url(ctx: ResolutionContext) -> str:
    session = ctx.session
    session_id = (session.session_id if session else None) or MISSING_SESSION_VALUE
    transaction_id = (session.transaction_id if session else None) or MISSING_SESSION_VALUE
    return f"{ctx.return_url}?session_id={session_id}&transaction_id={transaction_id}"


RETURN_URL_CHAIN: List[Resolver] = [explicit_return_url, default_return_url]


def explicit_redirect_url(ctx: ResolutionContext) -> Optional[str]:
    return _present(ctx.request.redirect_url)


def default_redirect_url(ctx: ResolutionContext) -> str:
    return ctx.redirect_url


REDIRECT_URL_CHAIN: List[Resolver] = [explicit_redirect_url, default_redirect_url]


def explicit_lsp_id(ctx: ResolutionContext) -> Optional[str]:
    return _present(ctx.request.lsp_id)


def default_lsp_id(ctx: ResolutionContext) -> str:
    return ctx.lsp_id


LSP_ID_CHAIN: List[Resolver] = [explicit_lsp_id, default_lsp_id]


def resolve_verify_fields(ctx: ResolutionContext) -> ResolvedVerifyFields:
    fields = ResolvedVerifyFields(
        lsp_id=resolve_first(LSP_ID_CHAIN, ctx),
        consent_handles=resolve_first(CONSENT_HANDLES_CHAIN, ctx) or [],
        user_id=resolve_first(CUSTOMER_ID_CHAIN, ctx),
        redirect_url=resolve_first(REDIRECT_URL_CHAIN, ctx),
        return_url=resolve_first(RETURN_URL_CHAIN, ctx),
        used_session=ctx.session is not None,
    )
    logger.debug(
        "Resolved verify fields: user_id_present=%s handles=%d used_session=%s",
        fields.user_id is not None,
        len(fields.consent_handles),
        fields.used_session,
    )
    return fields
