"""Tests for purchase intent transitions."""

import pytest

from satnames.features.purchase.models import IntentState, PaymentRail, PurchaseIntent


def new_intent():
    return PurchaseIntent(rail=PaymentRail.DIRECT_WALLET, handle="alice")


class TestPurchaseIntent:
    def test_starts_idle(self):
        intent = new_intent()
        assert intent.state == IntentState.IDLE
        assert intent.is_terminal is False

    def test_success_records_reference(self):
        intent = new_intent()
        intent.start()
        intent.succeed("tx1")

        assert intent.state == IntentState.SUCCEEDED
        assert intent.external_ref == "tx1"
        assert intent.is_terminal is True

    def test_success_keeps_earlier_reference(self):
        intent = new_intent()
        intent.start()
        intent.external_ref = "tx1"
        intent.succeed(None)
        assert intent.external_ref == "tx1"

    def test_failure_records_error(self):
        intent = new_intent()
        intent.start()
        intent.fail("User rejected")

        assert intent.state == IntentState.FAILED
        assert intent.error == "User rejected"

    @pytest.mark.parametrize("finish", ["succeed", "fail"])
    def test_terminal_states_are_final(self, finish):
        intent = new_intent()
        intent.start()
        intent.fail("first")

        with pytest.raises(ValueError):
            if finish == "succeed":
                intent.succeed("tx1")
            else:
                intent.fail("second")
        assert intent.error == "first"

    def test_to_dict(self):
        intent = new_intent()
        intent.start()
        data = intent.to_dict()

        assert data["rail"] == "direct_wallet"
        assert data["state"] == "in_flight"
        assert data["handle"] == "alice"
