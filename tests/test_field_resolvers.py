import pytest

import src.integrations.finvu.field_resolvers as resolvers_mod
from src.integrations.contracts.finvu import ConsentVerifyRequest
from src.integrations.contracts.session import SessionRecord
from src.integrations.finvu.field_resolvers import (
    CONTACT_NUMBER_CHAIN,
    ResolutionContext,
    resolve_contact_number,
    resolve_first,
    resolve_verify_fields,
)


def make_ctx(request=None, session=None):
    return ResolutionContext(
        request=request or ConsentVerifyRequest(),
        session=SessionRecord.from_dict(session) if session is not None else None,
        lsp_id="loanseva",
        redirect_url="https://sdkredirect.finvu.in/",
        return_url="http://localhost:8000/buyer/post-aa-consent",
    )


def test_resolve_first_returns_first_present_value():
    chain = [lambda ctx: None, lambda ctx: "second", lambda ctx: "third"]
    assert resolve_first(chain, make_ctx()) == "second"


def test_resolve_first_returns_none_when_chain_exhausted():
    assert resolve_first([lambda ctx: None], make_ctx()) is None


def test_contact_number_priority_order():
    session = {
        "form_data": {
            "personal_details_information_form": {"contactNumber": "3333333333"},
            "consumer_information_form": {"contactNumber": "2222222222"},
            "personal_loan_information_form": {"contactNumber": "1111111111"},
        }
    }
    assert resolve_contact_number(make_ctx(session=session)) == "1111111111"

    del session["form_data"]["personal_loan_information_form"]
    assert resolve_contact_number(make_ctx(session=session)) == "2222222222"

    del session["form_data"]["consumer_information_form"]
    assert resolve_contact_number(make_ctx(session=session)) == "3333333333"


def test_contact_number_skips_empty_values():
    session = {
        "form_data": {
            "personal_loan_information_form": {"contactNumber": ""},
            "consumer_information_form": {"contactNumber": "2222222222"},
        }
    }
    assert resolve_contact_number(make_ctx(session=session)) == "2222222222"


def test_contact_number_chain_has_three_product_forms():
    assert len(CONTACT_NUMBER_CHAIN) == 3
    assert resolve_contact_number(make_ctx()) is None


def test_customer_id_built_from_consumer_form_contact_number():
    session = {"form_data": {"consumer_information_form": {"contactNumber": "9990001111"}}}
    fields = resolve_verify_fields(make_ctx(session=session))
    assert fields.user_id == "9990001111@finvu"


def test_explicit_user_id_never_consults_contact_chain(monkeypatch):
    def fail(ctx):
        raise AssertionError("contact number chain must not be consulted")

    monkeypatch.setattr(resolvers_mod, "resolve_contact_number", fail)
    session = {"form_data": {"consumer_information_form": {"contactNumber": "9990001111"}}}

    fields = resolve_verify_fields(make_ctx(ConsentVerifyRequest(user_id="explicit@finvu"), session))

    assert fields.user_id == "explicit@finvu"


def test_customer_id_absent_is_omitted_from_body():
    fields = resolve_verify_fields(make_ctx())
    assert fields.user_id is None
    assert "userId" not in fields.to_body()


def test_consent_handles_from_session_when_not_explicit():
    fields = resolve_verify_fields(make_ctx(session={"consent_handler": "H1"}))
    assert fields.consent_handles == ["H1"]


def test_explicit_consent_handles_win_over_session():
    request = ConsentVerifyRequest(consent_handles=["X1", "X2"])
    fields = resolve_verify_fields(make_ctx(request, {"consent_handler": "H1"}))
    assert fields.consent_handles == ["X1", "X2"]


def test_explicit_empty_consent_handles_are_forwarded_as_is():
    request = ConsentVerifyRequest(consent_handles=[])
    fields = resolve_verify_fields(make_ctx(request, {"consent_handler": "H1"}))
    assert fields.consent_handles == []


def test_consent_handles_default_to_empty_list_without_session():
    assert resolve_verify_fields(make_ctx()).consent_handles == []


def test_default_return_url_interpolates_session_ids():
    fields = resolve_verify_fields(make_ctx(session={"session_id": "s-1", "transaction_id": "t-1"}))
    assert fields.return_url == "http://localhost:8000/buyer/post-aa-consent?session_id=s-1&transaction_id=t-1"


def test_default_return_url_without_session_embeds_literal_undefined():
    # Known quirk kept for compatibility with the loan-origination frontend:
    # missing ids are rendered as "undefined" instead of being omitted.
    fields = resolve_verify_fields(make_ctx())
    assert fields.return_url == (
        "http://localhost:8000/buyer/post-aa-consent?session_id=undefined&transaction_id=undefined"
    )


@pytest.mark.parametrize(
    "request_kwargs, expected",
    [
        ({}, ("loanseva", "https://sdkredirect.finvu.in/", None)),
        (
            {"lsp_id": "other-lsp", "redirect_url": "https://r.example", "return_url": "https://ret.example"},
            ("other-lsp", "https://r.example", "https://ret.example"),
        ),
    ],
)
def test_lsp_redirect_and_return_url_overrides(request_kwargs, expected):
    fields = resolve_verify_fields(make_ctx(ConsentVerifyRequest(**request_kwargs), {"session_id": "s"}))
    lsp_id, redirect_url, return_url = expected
    assert fields.lsp_id == lsp_id
    assert fields.redirect_url == redirect_url
    if return_url:
        assert fields.return_url == return_url


def test_to_body_uses_wire_field_names():
    request = ConsentVerifyRequest(user_id="u@finvu", consent_handles=["H"])
    body = resolve_verify_fields(make_ctx(request)).to_body()
    assert set(body) == {"lspId", "consentHandles", "userId", "url", "returnUrl"}
