"""Tests for the webhook signature gate."""

import hashlib
import hmac
import json

import pytest
from structlog.testing import capture_logs

from hookhub.errors import MalformedRequest, Unauthorized
from hookhub.webhooks.handlers import (
    check_preconditions,
    compute_signature,
    validate_github_signature,
    verify_request,
)

SECRET = "gh-secret"
BODY = json.dumps({"repository": {"name": "repo1"}}).encode()


def _sign(body: bytes, secret: str = SECRET) -> str:
    return "sha1=" + hmac.new(secret.encode(), body, hashlib.sha1).hexdigest()


class TestPreconditions:
    def test_all_present(self):
        check_preconditions(_sign(BODY), "push", BODY)

    def test_missing_signature(self):
        with pytest.raises(MalformedRequest):
            check_preconditions(None, "push", BODY)

    def test_short_signature(self):
        with pytest.raises(MalformedRequest):
            check_preconditions("sha1=abc", "push", BODY)

    def test_missing_event_type(self):
        with pytest.raises(MalformedRequest):
            check_preconditions(_sign(BODY), None, BODY)

    def test_empty_event_type(self):
        with pytest.raises(MalformedRequest):
            check_preconditions(_sign(BODY), "", BODY)

    def test_missing_body(self):
        with pytest.raises(MalformedRequest):
            check_preconditions(_sign(BODY), "push", None)
        with pytest.raises(MalformedRequest):
            check_preconditions(_sign(BODY), "push", b"")

    def test_error_carries_412(self):
        with pytest.raises(MalformedRequest) as exc:
            check_preconditions(None, None, None)
        assert exc.value.status == 412
        assert exc.value.message == "Missing or invalid request arguments"


class TestGitHubSignature:
    def test_compute_matches_hmac_sha1(self):
        assert compute_signature(BODY, SECRET) == _sign(BODY)
        assert compute_signature(BODY, SECRET).startswith("sha1=")
        assert len(compute_signature(BODY, SECRET)) == 45

    def test_valid_signature(self):
        assert validate_github_signature(BODY, _sign(BODY), SECRET) is True

    def test_wrong_secret(self):
        assert validate_github_signature(BODY, _sign(BODY, "other"), SECRET) is False

    def test_missing_signature(self):
        assert validate_github_signature(BODY, "", SECRET) is False

    def test_no_secret_configured_rejects(self):
        assert validate_github_signature(BODY, _sign(BODY, ""), "") is False

    def test_any_single_byte_mutation_rejected(self):
        signature = _sign(BODY)
        for i in range(len(BODY)):
            mutated = bytearray(BODY)
            mutated[i] ^= 0x01
            assert validate_github_signature(bytes(mutated), signature, SECRET) is False


class TestVerifyRequest:
    def test_returns_parsed_event(self):
        event = verify_request(_sign(BODY), "push", BODY, SECRET)
        assert event.event_type == "push"
        assert event.payload == {"repository": {"name": "repo1"}}
        assert event.raw_body == BODY
        assert event.signature == _sign(BODY)

    def test_bad_signature_raises_unauthorized(self):
        bad = "sha1=" + "0" * 40
        with pytest.raises(Unauthorized) as exc:
            verify_request(bad, "push", BODY, SECRET)
        assert exc.value.status == 401

    def test_bad_signature_logged_as_security_event(self):
        bad = "sha1=" + "0" * 40
        with capture_logs() as logs:
            with pytest.raises(Unauthorized):
                verify_request(bad, "push", BODY, SECRET)

        rejected = [e for e in logs if e["event"] == "webhook_signature_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["log_level"] == "warning"
        assert rejected[0]["event_type"] == "push"
        assert bad not in str(logs)
        assert SECRET not in str(logs)

    def test_valid_signature_not_logged_as_rejected(self):
        with capture_logs() as logs:
            verify_request(_sign(BODY), "push", BODY, SECRET)
        assert not [e for e in logs if e["event"] == "webhook_signature_rejected"]

    def test_reject_status_is_configurable(self):
        bad = "sha1=" + "0" * 40
        with pytest.raises(Unauthorized) as exc:
            verify_request(bad, "push", BODY, SECRET, reject_status=403)
        assert exc.value.status == 403

    def test_signature_checked_against_raw_bytes(self):
        # Same document, different byte layout
        reformatted = json.dumps(json.loads(BODY), indent=2).encode()
        with pytest.raises(Unauthorized):
            verify_request(_sign(BODY), "push", reformatted, SECRET)

    def test_preconditions_checked_before_signature(self):
        with pytest.raises(MalformedRequest):
            verify_request("sha1=short", "push", BODY, SECRET)

    def test_signed_non_json_body_is_malformed(self):
        body = b"not json"
        with pytest.raises(MalformedRequest):
            verify_request(_sign(body), "push", body, SECRET)

    def test_signed_json_array_is_malformed(self):
        body = b"[1, 2, 3]"
        with pytest.raises(MalformedRequest):
            verify_request(_sign(body), "push", body, SECRET)
