"""Delivery fanout: per-token sends, outcome tally and invalid-token pruning."""
from firebase_admin import exceptions, messaging
from sqlalchemy.exc import OperationalError

from sabi_push.schemas.notification import NotificationPayload
from sabi_push.services.notification_service import send_push_to_user
from sabi_push.services.push_gateway import PushGateway, channel_for_type, is_token_invalid

from conftest import FakeGateway


def _notification(type_="payment_received"):
    return NotificationPayload(title="⚡ Payment Received!", body="You received 1,000 sats",
                               type=type_, data={"amountSats": "1000"})


def test_no_tokens_means_no_sends(directory):
    gateway = FakeGateway()

    result = send_push_to_user(directory, gateway, "npub_nobody", _notification())

    assert (result.attempted, result.succeeded, result.failed) == (0, 0, 0)
    assert result.pruned_tokens == set()
    assert gateway.sent == []


def test_unregistered_token_is_pruned_and_others_kept(directory):
    directory.register_token("npub_a", "tok1")
    directory.register_token("npub_a", "tok2")
    gateway = FakeGateway(errors={"tok2": messaging.UnregisteredError("Requested entity was not found.")})

    result = send_push_to_user(directory, gateway, "npub_a", _notification())

    assert (result.attempted, result.succeeded, result.failed) == (2, 1, 1)
    assert result.pruned_tokens == {"tok2"}
    assert directory.tokens_for("npub_a") == {"tok1"}


def test_malformed_token_is_pruned(directory):
    directory.register_token("npub_a", "garbage")
    gateway = FakeGateway(errors={"garbage": exceptions.InvalidArgumentError("Invalid registration token")})

    result = send_push_to_user(directory, gateway, "npub_a", _notification())

    assert result.failed == 1
    assert directory.tokens_for("npub_a") == set()


def test_transient_error_keeps_token(directory):
    directory.register_token("npub_a", "tok1")
    directory.register_token("npub_a", "tok2")
    gateway = FakeGateway(errors={
        "tok1": exceptions.UnavailableError("FCM temporarily unavailable"),
        "tok2": ConnectionError("network blip"),
    })

    result = send_push_to_user(directory, gateway, "npub_a", _notification())

    assert (result.attempted, result.succeeded, result.failed) == (2, 0, 2)
    assert result.pruned_tokens == set()
    assert directory.tokens_for("npub_a") == {"tok1", "tok2"}


def test_every_token_gets_one_attempt(directory):
    for token in ("tok1", "tok2", "tok3"):
        directory.register_token("npub_a", token)
    gateway = FakeGateway()

    result = send_push_to_user(directory, gateway, "npub_a", _notification())

    assert result.succeeded == 3
    assert sorted(token for token, _ in gateway.sent) == ["tok1", "tok2", "tok3"]


def test_prune_failure_does_not_fail_delivery(directory, monkeypatch):
    directory.register_token("npub_a", "tok1")
    directory.register_token("npub_a", "tok2")
    gateway = FakeGateway(errors={"tok2": messaging.UnregisteredError("gone")})

    def broken_prune(identity, tokens):
        raise OperationalError("DELETE FROM pubkey_devices", {}, Exception("database is locked"))

    monkeypatch.setattr(directory, "prune_tokens", broken_prune)

    result = send_push_to_user(directory, gateway, "npub_a", _notification())

    assert (result.attempted, result.succeeded, result.failed) == (2, 1, 1)
    assert result.pruned_tokens == set()
    assert directory.tokens_for("npub_a") == {"tok1", "tok2"}


def test_invalid_token_classification():
    assert is_token_invalid(messaging.UnregisteredError("gone"))
    assert is_token_invalid(messaging.SenderIdMismatchError("wrong sender"))
    assert is_token_invalid(exceptions.InvalidArgumentError("bad token"))
    assert not is_token_invalid(exceptions.UnavailableError("try later"))
    assert not is_token_invalid(TimeoutError())


def test_channel_lookup_defaults_for_unknown_types():
    assert channel_for_type("payment_received") == "sabi_wallet_payments"
    assert channel_for_type("p2p_funds_released") == "sabi_wallet_p2p"
    assert channel_for_type("zap_received") == "sabi_wallet_social"
    assert channel_for_type("vtu_order_failed") == "sabi_wallet_vtu"
    assert channel_for_type("something_new") == "sabi_wallet_default"
    assert channel_for_type(None) == "sabi_wallet_default"


def test_build_message_carries_delivery_hints():
    message = PushGateway().build_message("tok1", _notification("zap_received"))

    assert message.token == "tok1"
    assert message.data == {"type": "zap_received", "amountSats": "1000"}
    assert message.android.priority == "high"
    assert message.android.notification.channel_id == "sabi_wallet_social"
    assert message.android.notification.default_sound is True
    assert message.apns.payload.aps.sound == "default"
    assert message.apns.payload.aps.badge == 1
