"""Device registration endpoints."""
from fastapi.testclient import TestClient

from sabi_push.models.device import Device
from sabi_push.services.token_directory import TokenDirectory


def test_register_device(client: TestClient, db):
    r = client.post("/register-device", json={
        "fcmToken": "tok1", "nostrPubkey": "npub_a", "platform": "ios", "appVersion": "1.4.0",
    })

    assert r.status_code == 200
    assert r.json()["success"] is True
    device = db.get(Device, "tok1")
    assert (device.nostr_pubkey, device.platform, device.app_version) == ("npub_a", "ios", "1.4.0")


def test_register_is_idempotent(client: TestClient, db):
    for _ in range(2):
        r = client.post("/register-device", json={"fcmToken": "tok1", "nostrPubkey": "npub_a"})
        assert r.status_code == 200

    assert TokenDirectory(db).tokens_for("npub_a") == {"tok1"}


def test_register_requires_token_and_pubkey(client: TestClient, db):
    r = client.post("/register-device", json={"fcmToken": "tok1"})

    assert r.status_code == 400
    assert r.json() == {"error": "fcmToken and nostrPubkey are required"}
    assert db.query(Device).count() == 0


def test_register_rejects_unknown_platform(client: TestClient):
    r = client.post("/register-device", json={"fcmToken": "tok1", "nostrPubkey": "npub_a", "platform": "symbian"})

    assert r.status_code == 400
    assert r.json() == {"error": "Invalid platform"}


def test_unregister_device(client: TestClient, db):
    client.post("/register-device", json={"fcmToken": "tok1", "nostrPubkey": "npub_a"})

    r = client.post("/unregister-device", json={"fcmToken": "tok1", "nostrPubkey": "npub_a"})

    assert r.status_code == 200
    assert r.json()["success"] is True
    assert TokenDirectory(db).tokens_for("npub_a") == set()


def test_unregister_unknown_token_succeeds(client: TestClient):
    r = client.post("/unregister-device", json={"fcmToken": "never-seen"})

    assert r.status_code == 200
    assert r.json()["success"] is True


def test_unregister_requires_token(client: TestClient):
    r = client.post("/unregister-device", json={"nostrPubkey": "npub_a"})

    assert r.status_code == 400
    assert r.json() == {"error": "fcmToken is required"}
