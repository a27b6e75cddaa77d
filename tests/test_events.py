import base64

from zigscan.core.models import TransferSummary
from zigscan.decoding.events import extract_transfer


def _b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


def test_plain_attributes(addresses: dict[str, str]) -> None:
    events = [
        {"type": "coin_spent", "attributes": [{"key": "spender", "value": addresses["sender"]}]},
        {
            "type": "transfer",
            "attributes": [
                {"key": "recipient", "value": addresses["recipient"]},
                {"key": "sender", "value": addresses["sender"]},
                {"key": "amount", "value": "1000uzig"},
            ],
        },
    ]
    assert extract_transfer(events) == TransferSummary(
        sender=addresses["sender"], recipient=addresses["recipient"], amount="1000uzig"
    )


def test_base64_attributes(addresses: dict[str, str]) -> None:
    events = [
        {
            "type": "transfer",
            "attributes": [
                {"key": _b64("recipient"), "value": _b64(addresses["recipient"])},
                {"key": _b64("sender"), "value": _b64(addresses["sender"])},
                {"key": _b64("amount"), "value": _b64("5uzig")},
            ],
        }
    ]
    summary = extract_transfer(events)
    assert summary.sender == addresses["sender"]
    assert summary.recipient == addresses["recipient"]
    assert summary.amount == "5uzig"


def test_missing_attributes_are_none(addresses: dict[str, str]) -> None:
    events = [{"type": "transfer", "attributes": [{"key": "recipient", "value": addresses["recipient"]}]}]
    assert extract_transfer(events) == TransferSummary(recipient=addresses["recipient"])


def test_only_the_first_transfer_event_is_read() -> None:
    events = [
        {"type": "transfer", "attributes": [{"key": "amount", "value": "1uzig"}]},
        {"type": "transfer", "attributes": [{"key": "amount", "value": "2uzig"}]},
    ]
    assert extract_transfer(events).amount == "1uzig"


def test_no_transfer_event() -> None:
    assert extract_transfer([{"type": "message", "attributes": []}]) == TransferSummary()
    assert extract_transfer([]) == TransferSummary()
    assert extract_transfer(None) == TransferSummary()


def test_malformed_events_are_ignored() -> None:
    events = ["junk", {"type": "transfer", "attributes": ["junk", {"key": "amount", "value": "3uzig"}]}]
    assert extract_transfer(events).amount == "3uzig"
