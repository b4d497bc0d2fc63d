"""Unit tests for the OTP engine against the SQLite session."""
from datetime import timedelta

import pytest
from fastapi import BackgroundTasks

from linkoja import models
from linkoja.core.errors import (
    OtpNotFoundError,
    OtpExpiredError,
    TooManyAttemptsError,
    InvalidCodeError,
    RateLimitedError,
)
from linkoja.services.otp_service import OtpService, generate_otp_code
from linkoja.types import utcnow

PHONE = "+2348012345678"


@pytest.fixture
def otp_service(db_session, settings, sms_service, email_service):
    return OtpService(db_session, settings, sms_service, email_service)


def live_records(db_session, phone=PHONE):
    return db_session.query(models.OtpVerification).filter(
        models.OtpVerification.phone_number == phone,
        models.OtpVerification.is_verified.is_(False),
    ).all()


def wrong_code(code):
    return "111111" if code != "111111" else "222222"


class TestGenerateOtpCode:
    def test_codes_are_six_digits_in_range(self):
        for _ in range(200):
            code = generate_otp_code()
            assert len(code) == 6
            assert 100000 <= int(code) <= 999999


class TestSend:
    def test_send_creates_single_live_record(self, otp_service, db_session):
        before = utcnow()
        otp_service.send(PHONE)

        records = live_records(db_session)
        assert len(records) == 1
        otp = records[0]
        assert len(otp.otp_code) == 6 and otp.otp_code.isdigit()
        assert otp.attempt_count == 0
        expected = before + timedelta(minutes=10)
        assert abs((otp.expires_at - expected).total_seconds()) < 5

    def test_send_again_overwrites_existing_record(self, otp_service, db_session):
        otp_service.send(PHONE)
        first = live_records(db_session)[0]
        first_id = first.id
        first.attempt_count = 2
        db_session.commit()

        otp_service.send(PHONE)

        records = live_records(db_session)
        assert len(records) == 1
        assert records[0].id == first_id
        assert records[0].attempt_count == 0

    def test_send_delivers_sms_with_code(self, otp_service, db_session, sms_service):
        otp_service.send(PHONE)
        code = live_records(db_session)[0].otp_code

        assert len(sms_service.sent) == 1
        phone, message = sms_service.sent[0]
        assert phone == PHONE
        assert code in message

    def test_send_emails_user_sharing_the_phone(self, otp_service, db_session, email_service, make_user):
        make_user("phone.owner@example.com", phone=PHONE)

        otp_service.send(PHONE)
        code = live_records(db_session)[0].otp_code

        assert email_service.of_kind("otp") == [("otp", "phone.owner@example.com", code)]

    def test_send_succeeds_when_sms_fails(self, db_session, settings, email_service):
        class FailingSms:
            def send_sms(self, phone_number, message):
                return False

        service = OtpService(db_session, settings, FailingSms(), email_service)
        assert service.send(PHONE) is True
        assert len(live_records(db_session)) == 1


    def test_deliveries_are_queued_when_running_in_a_request(self, db_session, settings, sms_service, email_service, make_user):
        make_user("phone.owner@example.com", phone=PHONE)
        tasks = BackgroundTasks()
        service = OtpService(db_session, settings, sms_service, email_service, tasks)

        service.send(PHONE)

        assert sms_service.sent == []
        assert email_service.of_kind("otp") == []
        assert len(tasks.tasks) == 2
        assert tasks.tasks[0].args[0] == PHONE


class TestVerify:
    def test_verify_with_correct_code(self, otp_service, db_session, make_user):
        user = make_user("verify.me@example.com", phone=PHONE)
        otp_service.send(PHONE)
        code = live_records(db_session)[0].otp_code

        assert otp_service.verify(PHONE, code) is True

        assert live_records(db_session) == []
        db_session.refresh(user)
        assert user.is_phone_verified is True

    def test_verify_without_record_fails_not_found(self, otp_service):
        with pytest.raises(OtpNotFoundError):
            otp_service.verify(PHONE, "123456")

    def test_wrong_code_counts_attempt(self, otp_service, db_session):
        otp_service.send(PHONE)
        otp = live_records(db_session)[0]

        with pytest.raises(InvalidCodeError):
            otp_service.verify(PHONE, wrong_code(otp.otp_code))

        db_session.refresh(otp)
        assert otp.attempt_count == 1
        assert otp.is_verified is False

    def test_non_ascii_code_counts_as_wrong_attempt(self, otp_service, db_session):
        otp_service.send(PHONE)
        otp = live_records(db_session)[0]

        with pytest.raises(InvalidCodeError):
            otp_service.verify(PHONE, "١٢٣٤٥٦")

        db_session.refresh(otp)
        assert otp.attempt_count == 1

    def test_fourth_attempt_rejected_even_with_correct_code(self, otp_service, db_session):
        otp_service.send(PHONE)
        code = live_records(db_session)[0].otp_code

        for _ in range(3):
            with pytest.raises(InvalidCodeError):
                otp_service.verify(PHONE, wrong_code(code))

        with pytest.raises(TooManyAttemptsError):
            otp_service.verify(PHONE, code)

    def test_expired_record_fails_regardless_of_code(self, otp_service, db_session):
        otp_service.send(PHONE)
        otp = live_records(db_session)[0]
        otp.expires_at = utcnow() - timedelta(seconds=1)
        db_session.commit()

        with pytest.raises(OtpExpiredError):
            otp_service.verify(PHONE, otp.otp_code)

    def test_resend_after_exhausting_attempts_gives_fresh_budget(self, otp_service, db_session):
        otp_service.send(PHONE)
        otp = live_records(db_session)[0]
        otp.attempt_count = 3
        db_session.commit()

        otp_service.send(PHONE)
        code = live_records(db_session)[0].otp_code
        assert otp_service.verify(PHONE, code) is True


class TestResend:
    def test_resend_within_cooldown_is_rate_limited(self, otp_service):
        otp_service.resend(PHONE)
        with pytest.raises(RateLimitedError):
            otp_service.resend(PHONE)

    def test_resend_after_cooldown_sends_again(self, otp_service, db_session, sms_service):
        otp_service.send(PHONE)
        otp = live_records(db_session)[0]
        otp.created_at = utcnow() - timedelta(seconds=61)
        db_session.commit()

        assert otp_service.resend(PHONE) is True
        assert len(sms_service.sent) == 2

    def test_cooldown_counts_verified_records(self, otp_service, db_session):
        otp_service.send(PHONE)
        code = live_records(db_session)[0].otp_code
        otp_service.verify(PHONE, code)

        with pytest.raises(RateLimitedError):
            otp_service.resend(PHONE)
