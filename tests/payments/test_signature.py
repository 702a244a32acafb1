import base64
import hashlib
import hmac

from infrastructure.external.payments.signature import sign_body, verify_signature


BODY = b'{"event":"OPENPIX:CHARGE_COMPLETED","charge":{"transactionID":"tx-1","status":"COMPLETED"}}'


def test_sign_body_is_base64_hmac_sha256():
    expected = base64.b64encode(hmac.new(b"segredo", BODY, hashlib.sha256).digest()).decode()
    assert sign_body("segredo", BODY) == expected


def test_verify_accepts_base64_and_hex():
    digest = hmac.new(b"segredo", BODY, hashlib.sha256)
    assert verify_signature("segredo", BODY, sign_body("segredo", BODY))
    assert verify_signature("segredo", BODY, digest.hexdigest())
    assert verify_signature("segredo", BODY, digest.hexdigest().upper())


def test_verify_rejects_missing_or_wrong_signature():
    assert not verify_signature("segredo", BODY, None)
    assert not verify_signature("segredo", BODY, "")
    assert not verify_signature("segredo", BODY, sign_body("outro", BODY))
    assert not verify_signature("segredo", BODY + b" ", sign_body("segredo", BODY))
