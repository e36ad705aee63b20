"""
Session record contract.

Session blobs are written to the store by the upstream loan-origination
workflow. Every field is optional. The nested form_data mapping differs per
loan product, so it is parsed into a tagged union of known product forms plus
an `extensions` bucket for forms this gateway does not know about yet.

The raw mapping is kept on the record so that a rewrite never drops fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Type


# ---------------------------------------------------------------------------
# Loan-product forms
# ---------------------------------------------------------------------------

@dataclass
class LoanProductForm:
    kind: ClassVar[str] = "unknown"

    contact_number: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoanProductForm":
        contact = data.get("contactNumber")
        return cls(
            contact_number=str(contact) if contact not in (None, "") else None,
            fields=dict(data),
        )


@dataclass
class PersonalLoanInformationForm(LoanProductForm):
    kind: ClassVar[str] = "personal_loan_information_form"


@dataclass
class ConsumerInformationForm(LoanProductForm):
    """Gold loan applicant details."""
    kind: ClassVar[str] = "consumer_information_form"


@dataclass
class PersonalDetailsInformationForm(LoanProductForm):
    kind: ClassVar[str] = "personal_details_information_form"


KNOWN_FORMS: Dict[str, Type[LoanProductForm]] = {
    form_cls.kind: form_cls
    for form_cls in (
        PersonalLoanInformationForm,
        ConsumerInformationForm,
        PersonalDetailsInformationForm,
    )
}


@dataclass
class FormData:
    forms: Dict[str, LoanProductForm] = field(default_factory=dict)
    extensions: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "FormData":
        if not isinstance(data, dict):
            return cls()
        forms: Dict[str, LoanProductForm] = {}
        extensions: Dict[str, Any] = {}
        for key, value in data.items():
            form_cls = KNOWN_FORMS.get(key)
            if form_cls is not None and isinstance(value, dict):
                forms[key] = form_cls.from_dict(value)
            else:
                extensions[key] = value
        return cls(forms=forms, extensions=extensions)

    def get(self, kind: str) -> Optional[LoanProductForm]:
        return self.forms.get(kind)


# ---------------------------------------------------------------------------
# Session record
# ---------------------------------------------------------------------------

_KNOWN_TOP_LEVEL = (
    "transaction_id",
    "message_id",
    "customer_id",
    "consent_handler",
    "consentUrl",
    "session_id",
    "flow_id",
    "domain",
    "form_data",
)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass
class SessionRecord:
    transaction_id: Optional[str] = None
    message_id: Optional[str] = None
    customer_id: Optional[str] = None
    consent_handler: Optional[str] = None
    consent_url: Optional[str] = None
    session_id: Optional[str] = None
    flow_id: Optional[str] = None
    domain: Optional[str] = None
    form_data: FormData = field(default_factory=FormData)
    extra: Dict[str, Any] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        return cls(
            transaction_id=_optional_str(data.get("transaction_id")),
            message_id=_optional_str(data.get("message_id")),
            customer_id=_optional_str(data.get("customer_id")),
            consent_handler=_optional_str(data.get("consent_handler")),
            consent_url=_optional_str(data.get("consentUrl")),
            session_id=_optional_str(data.get("session_id")),
            flow_id=_optional_str(data.get("flow_id")),
            domain=_optional_str(data.get("domain")),
            form_data=FormData.from_dict(data.get("form_data")),
            extra={k: v for k, v in data.items() if k not in _KNOWN_TOP_LEVEL},
            raw=dict(data),
        )

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.raw)

    def merged(self, updates: Dict[str, Any]) -> "SessionRecord":
        return SessionRecord.from_dict({**self.raw, **updates})
