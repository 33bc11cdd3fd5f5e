from cryptography.fernet import Fernet

from api.session import SessionVerifier


def test_issue_and_verify(session_key):
    verifier = SessionVerifier(key=session_key)
    assert verifier.verify(verifier.issue("user-7")) == "user-7"


def test_rejects_missing_and_foreign_tokens(session_key):
    verifier = SessionVerifier(key=session_key)
    other = SessionVerifier(key=Fernet.generate_key().decode())
    assert verifier.verify(None) is None
    assert verifier.verify("") is None
    assert verifier.verify("garbage") is None
    assert verifier.verify(other.issue("user-7")) is None


def test_expired_token_rejected(session_key):
    issuer = SessionVerifier(key=session_key)
    token = issuer.fernet.encrypt_at_time(b"user-7", 1_000)
    assert SessionVerifier(key=session_key, ttl_s=60).verify(token.decode()) is None
