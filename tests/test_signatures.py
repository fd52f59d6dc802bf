# =============================================================================
# tests/test_signatures.py - E-Signature Tests
# =============================================================================

import base64
import io
import json
from datetime import timedelta

import pytest
from PIL import Image
from pydantic import ValidationError

from app.exceptions import ShareForbiddenError, SignatureStateError
from core.models.signature import SignerCreate, SignRequest
from core.services.share_service import generate_share_token, to_url_token
from core.services.signature_service import SignatureService, render_typed_signature, summarize_signers
from lib.utils import utc_now

from tests.conftest import USER_ID


def add_signers(proposal, *names):
    return [
        SignatureService.add_signer(proposal["id"], USER_ID, SignerCreate(signer_name=name, signer_email=f"{name.lower()}@acme.test"))
        for name in names
    ]


def share_token_for(fake_db, proposal, require_signature=True):
    token = generate_share_token()
    fake_db.seed(
        "secure_proposal_shares",
        proposal_id=proposal["id"],
        share_token=token,
        permissions=json.dumps({"trackViews": False, "requireSignature": require_signature}),
        expires_at=(utc_now() + timedelta(days=3)).isoformat(),
    )
    return to_url_token(token)


class TestTypedSignature:

    def test_png_data_url(self):
        data_url = render_typed_signature("Jane Doe")
        assert data_url.startswith("data:image/png;base64,")

        image = Image.open(io.BytesIO(base64.b64decode(data_url.split(",", 1)[1])))
        assert image.size == (400, 100)
        assert image.format == "PNG"


class TestSignRequest:

    def test_requires_exactly_one_source(self):
        with pytest.raises(ValidationError):
            SignRequest()
        with pytest.raises(ValidationError):
            SignRequest(signature_data="data:image/png;base64,AAAA", typed_name="Jane")

    def test_rejects_non_image_data(self):
        with pytest.raises(ValidationError):
            SignRequest(signature_data="javascript:alert(1)")


class TestSignatureService:

    def test_signers_are_ordered(self, fake_db, proposal):
        first, second = add_signers(proposal, "Ann", "Bob")
        assert (first["order"], second["order"]) == (1, 2)
        assert first["status"] == "pending"

        listed = SignatureService.list_signers(proposal["id"], USER_ID)
        assert [(s["signer_name"], s["order"]) for s in listed] == [("Ann", 1), ("Bob", 2)]

    def test_partial_signing_keeps_status(self, fake_db, proposal):
        first, _ = add_signers(proposal, "Ann", "Bob")

        result = SignatureService.sign(
            first["id"], SignRequest(typed_name="Ann"), ip_address="203.0.113.7", user_agent="pytest", user_id=USER_ID,
        )

        assert result["all_signed"] is False
        assert result["proposal"]["status"] == "draft"
        stored = fake_db.rows("proposal_signatures")[0]
        assert stored["status"] == "signed"
        assert stored["ip_address"] == "203.0.113.7"
        assert stored["signature_data"].startswith("data:image/png;base64,")
        assert stored["signed_at"]

    def test_last_signature_signs_proposal(self, fake_db, proposal):
        first, second = add_signers(proposal, "Ann", "Bob")
        SignatureService.sign(first["id"], SignRequest(typed_name="Ann"), user_id=USER_ID)
        result = SignatureService.sign(second["id"], SignRequest(signature_data="data:image/png;base64,AAAA"), user_id=USER_ID)

        assert result["all_signed"] is True
        assert fake_db.rows("proposals")[0]["status"] == "signed"

    def test_cannot_sign_twice(self, fake_db, proposal):
        [signer] = add_signers(proposal, "Ann")
        SignatureService.sign(signer["id"], SignRequest(typed_name="Ann"), user_id=USER_ID)
        with pytest.raises(SignatureStateError):
            SignatureService.sign(signer["id"], SignRequest(typed_name="Ann"), user_id=USER_ID)

    def test_visitor_needs_require_signature(self, fake_db, proposal):
        [signer] = add_signers(proposal, "Ann")
        token = share_token_for(fake_db, proposal, require_signature=False)
        with pytest.raises(ShareForbiddenError):
            SignatureService.sign(signer["id"], SignRequest(typed_name="Ann"), share_token=token)

    def test_decline(self, fake_db, proposal):
        [signer] = add_signers(proposal, "Ann")
        declined = SignatureService.decline(signer["id"], user_id=USER_ID)
        assert declined["status"] == "declined"

    def test_summary(self, fake_db, proposal):
        first, _, _ = add_signers(proposal, "Ann", "Bob", "Cy")
        SignatureService.sign(first["id"], SignRequest(typed_name="Ann"), user_id=USER_ID)

        summary = SignatureService.get_summary(proposal["id"], USER_ID)
        assert (summary.signed, summary.total, summary.percent, summary.all_signed) == (1, 3, 33, False)

    def test_summary_of_nobody(self):
        summary = summarize_signers([])
        assert (summary.total, summary.percent, summary.all_signed) == (0, 0, False)


class TestSignatureApi:

    def test_owner_flow_emits_signed_event(self, client, fake_db, proposal, queued):
        created = client.post(
            f"/api/v1/proposals/{proposal['id']}/signatures",
            json={"signer_name": "Ann", "signer_email": "ann@acme.test"},
        )
        assert created.status_code == 201
        signature_id = created.json()["id"]

        signed = client.post(f"/api/v1/signatures/{signature_id}/sign", json={"typed_name": "Ann"})
        assert signed.status_code == 200
        assert signed.json()["all_signed"] is True
        assert signed.json()["proposal_status"] == "signed"
        assert [args[1] for args, _ in queued["webhooks"]] == ["proposal.signed"]

    def test_visitor_signs_through_share(self, anonymous_client, fake_db, proposal, queued):
        [signer] = add_signers(proposal, "Ann")
        token = share_token_for(fake_db, proposal)

        response = anonymous_client.post(
            f"/api/v1/shared/{token}/signatures/{signer['id']}/sign",
            json={"typed_name": "Ann"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "signed"
        assert queued["webhooks"][0][0][1] == "proposal.signed"

    def test_signer_ip_ignores_forwarded_for(self, anonymous_client, fake_db, proposal, queued):
        [signer] = add_signers(proposal, "Ann")
        token = share_token_for(fake_db, proposal)

        anonymous_client.post(
            f"/api/v1/shared/{token}/signatures/{signer['id']}/sign",
            json={"typed_name": "Ann"},
            headers={"X-Forwarded-For": "198.51.100.23"},
        )

        assert fake_db.rows("proposal_signatures")[0]["ip_address"] == "testclient"

    def test_second_signature_conflicts(self, client, fake_db, proposal):
        [signer] = add_signers(proposal, "Ann")
        client.post(f"/api/v1/signatures/{signer['id']}/sign", json={"typed_name": "Ann"})
        response = client.post(f"/api/v1/signatures/{signer['id']}/sign", json={"typed_name": "Ann"})
        assert response.status_code == 409
