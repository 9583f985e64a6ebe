from unittest.mock import MagicMock

import pytest

from feed_client.countdown import ResendCountdown
from feed_client.email_flow import EmailVerificationFlow
from feed_client.exceptions import ApiError, NetworkFailure, ValidationError


@pytest.fixture
def api():
    return MagicMock()


@pytest.fixture
def flow(api):
    return EmailVerificationFlow(api, countdown=ResendCountdown())


def test_request_code_starts_advisory_countdown(flow, api):
    api.send_email_otp.return_value = {
        "success": True,
        "expires_at": "2025-03-22T10:05:00Z",
        "resend_after": 60,
    }

    assert flow.request_code() is True
    assert flow.code_sent
    assert flow.expires_at == "2025-03-22T10:05:00Z"
    assert flow.countdown.remaining == 300
    assert not flow.countdown.can_resend()


def test_resend_is_blocked_while_counting_down(flow, api):
    api.send_email_otp.return_value = {"success": True, "expires_at": None}
    flow.request_code()

    assert flow.resend() is False
    assert api.send_email_otp.call_count == 1


def test_server_cooldown_drives_the_countdown(flow, api):
    api.send_email_otp.side_effect = ApiError(
        {"email": "Please wait before requesting another code."},
        429,
        code="rate_limited",
        retry_after=42,
    )

    assert flow.request_code() is False
    assert flow.countdown.remaining == 42
    assert flow.error == "Please wait before requesting another code."


def test_submit_after_countdown_hits_zero_still_asks_server(flow, api):
    api.send_email_otp.return_value = {"success": True, "expires_at": None}
    api.verify_email_otp.return_value = {
        "success": True,
        "email_verified_at": "2025-03-22T10:00:20Z",
        "already_verified": False,
    }
    flow.request_code()
    flow.countdown.cancel()

    assert flow.submit("483920") is True
    api.verify_email_otp.assert_called_once_with("483920")
    assert flow.verified
    assert flow.verified_at == "2025-03-22T10:00:20Z"


def test_wrong_code_shows_server_error(flow, api):
    api.verify_email_otp.side_effect = ApiError(
        {"otp": "Invalid verification code."},
        400,
        code="invalid",
        body={"remaining_attempts": 4},
    )
    flow.code_sent = True

    assert flow.submit("000000") is False
    assert flow.error == "Invalid verification code."
    assert flow.code_sent


def test_expired_code_requires_new_request(flow, api):
    api.verify_email_otp.side_effect = ApiError(
        {"otp": "This code has expired."}, 400, code="expired"
    )
    flow.code_sent = True

    assert flow.submit("483920") is False
    assert not flow.code_sent


def test_last_failed_attempt_requires_new_request(flow, api):
    api.verify_email_otp.side_effect = ApiError(
        {"otp": "Too many invalid attempts."}, 400, code="invalid", body={"remaining_attempts": 0}
    )
    flow.code_sent = True

    flow.submit("111111")
    assert not flow.code_sent


def test_malformed_code_is_rejected_locally(flow, api):
    with pytest.raises(ValidationError):
        flow.submit("12ab")
    api.verify_email_otp.assert_not_called()


def test_network_failure_keeps_state(flow, api):
    api.verify_email_otp.side_effect = NetworkFailure()
    flow.code_sent = True

    assert flow.submit("123456") is False
    assert flow.code_sent
    assert flow.error
