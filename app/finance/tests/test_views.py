"""
Tests for the finance API views.

Requests go through the full URL configuration with an authenticated
APIClient. Money comes back as strings.
"""

import datetime
import uuid
from decimal import Decimal
from unittest import mock

import pytest

from finance.models import CreditCardInvoice, PushToken, Transaction
from finance.services import ledger

from .factories import (
    AccountFactory,
    CreditCardInvoiceFactory,
    GoalFactory,
    InvestmentFactory,
    PushTokenFactory,
)

BASE = "/api/v1/finance"


def balance_of(account):
    account.refresh_from_db()
    return account.balance


class TestAuthentication:
    def test_requires_login(self, db, api_client):
        response = api_client.get(f"{BASE}/accounts/")

        assert response.status_code == 403

    def test_health_check(self, db, api_client):
        response = api_client.get("/health/")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestAccountViews:
    """Tests for /accounts/."""

    def test_create_and_list(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/accounts/",
            {"name": "Wallet", "type": "wallet", "balance": "12.50"},
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["balance"] == "12.50"

        listed = authenticated_client.get(f"{BASE}/accounts/").json()
        assert [a["name"] for a in listed] == ["Wallet"]

    def test_patch_keeps_balance(self, db, authenticated_client, account):
        response = authenticated_client.patch(
            f"{BASE}/accounts/{account.id}/", {"name": "Main"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Main"
        assert response.json()["balance"] == "100.00"

    def test_other_users_account_is_404(self, db, other_client, account):
        response = other_client.get(f"{BASE}/accounts/{account.id}/")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ACCOUNT_NOT_FOUND"

    def test_delete_in_use_is_409(self, db, authenticated_client, user, account, expense_input):
        ledger.create(user.id, expense_input(account_id=account.id))

        response = authenticated_client.delete(f"{BASE}/accounts/{account.id}/")

        assert response.status_code == 409
        assert response.json()["error_code"] == "RESOURCE_IN_USE"


class TestCategoryViews:
    def test_create_list_delete(self, db, authenticated_client):
        created = authenticated_client.post(
            f"{BASE}/categories/", {"name": "Food", "type": "expense"}, format="json"
        )
        assert created.status_code == 201

        listed = authenticated_client.get(f"{BASE}/categories/", {"type": "expense"}).json()
        assert [c["name"] for c in listed] == ["Food"]

        deleted = authenticated_client.delete(f"{BASE}/categories/{created.json()['id']}/")
        assert deleted.status_code == 204

    def test_patch(self, db, authenticated_client, category):
        response = authenticated_client.patch(
            f"{BASE}/categories/{category.id}/", {"icon": "cart"}, format="json"
        )

        assert response.status_code == 200
        assert response.json() == {
            "id": str(category.id),
            "name": "Groceries",
            "icon": "cart",
            "type": "expense",
        }

    def test_patch_other_users_category_is_404(self, db, other_client, category):
        response = other_client.patch(
            f"{BASE}/categories/{category.id}/", {"name": "Mine"}, format="json"
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "CATEGORY_NOT_FOUND"


class TestTransactionViews:
    """Tests for /transactions/."""

    def test_create_expense(self, db, authenticated_client, account):
        response = authenticated_client.post(
            f"{BASE}/transactions/",
            {
                "type": "expense",
                "amount": "30.00",
                "date": "2024-03-10",
                "description": "Groceries",
                "accountId": str(account.id),
            },
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["amount"] == "30.00"
        assert body["accountId"] == str(account.id)
        assert body["creditCardId"] is None
        assert body["recurrenceState"] is None
        assert balance_of(account) == Decimal("70.00")

    def test_create_recurring(self, db, authenticated_client, account):
        response = authenticated_client.post(
            f"{BASE}/transactions/",
            {
                "type": "income",
                "amount": "1000",
                "date": "2024-01-31",
                "accountId": str(account.id),
                "recurring": True,
                "recurrence": "monthly",
                "recurrenceCount": 12,
            },
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["recurrenceState"] == "active"
        assert body["nextDueDate"] == "2024-02-29"
        assert body["recurrenceCurrent"] == 1

    def test_date_defaults_to_today(self, db, authenticated_client, account):
        response = authenticated_client.post(
            f"{BASE}/transactions/",
            {"type": "expense", "amount": "5", "accountId": str(account.id)},
            format="json",
        )

        assert response.status_code == 201
        assert response.json()["date"] is not None

    def test_missing_attribution_is_400(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/transactions/",
            {"type": "expense", "amount": "30.00", "date": "2024-03-10"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ATTRIBUTION"

    def test_income_on_card_is_400(self, db, authenticated_client, card):
        response = authenticated_client.post(
            f"{BASE}/transactions/",
            {
                "type": "income",
                "amount": "30.00",
                "date": "2024-03-10",
                "creditCardId": str(card.id),
            },
            format="json",
        )

        assert response.status_code == 400
        assert not Transaction.objects.exists()

    def test_malformed_payload_is_400(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/transactions/", {"type": "gift", "amount": "abc"}, format="json"
        )

        assert response.status_code == 400

    def test_patch_and_delete(self, db, authenticated_client, user, account, expense_input):
        tx = ledger.create(user.id, expense_input(account_id=account.id))

        patched = authenticated_client.patch(
            f"{BASE}/transactions/{tx.id}/", {"amount": "50.00"}, format="json"
        )
        assert patched.status_code == 200
        assert balance_of(account) == Decimal("50.00")

        deleted = authenticated_client.delete(f"{BASE}/transactions/{tx.id}/")
        assert deleted.status_code == 204
        assert balance_of(account) == Decimal("100.00")

    def test_list_is_scoped(self, db, authenticated_client, other_user, expense_input):
        foreign = AccountFactory(user=other_user)
        ledger.create(other_user.id, expense_input(account_id=foreign.id))

        assert authenticated_client.get(f"{BASE}/transactions/").json() == []

    def test_recurrence_patch_on_plain_row_is_409(
        self, db, authenticated_client, user, account, expense_input
    ):
        tx = ledger.create(user.id, expense_input(account_id=account.id))

        response = authenticated_client.patch(
            f"{BASE}/transactions/{tx.id}/", {"recurrenceCount": 3}, format="json"
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "NOT_A_RECURRING_DEFINITION"


class TestTransferView:
    def test_transfer(self, db, authenticated_client, account, savings):
        response = authenticated_client.post(
            f"{BASE}/transfers/",
            {
                "fromAccountId": str(account.id),
                "toAccountId": str(savings.id),
                "amount": "40.00",
            },
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["outgoing"]["type"] == "expense"
        assert body["incoming"]["type"] == "income"
        assert balance_of(account) == Decimal("60.00")
        assert balance_of(savings) == Decimal("40.00")

    def test_same_account_is_400(self, db, authenticated_client, account):
        response = authenticated_client.post(
            f"{BASE}/transfers/",
            {"fromAccountId": str(account.id), "toAccountId": str(account.id), "amount": "1"},
            format="json",
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_TRANSFER"


class TestRecurrenceViews:
    """Tests for /recurrences/."""

    @pytest.fixture
    def definition(self, user, account, expense_input):
        definition = ledger.create(
            user.id,
            expense_input(
                account_id=account.id,
                date=datetime.date(2024, 3, 1),
                recurring=True,
                recurrence="daily",
            ),
        )
        ledger.run_recurrence_sweep(today=datetime.date(2024, 3, 2))
        return definition

    def test_list(self, db, authenticated_client, definition):
        body = authenticated_client.get(f"{BASE}/recurrences/").json()

        assert [d["id"] for d in body] == [str(definition.id)]

    def test_occurrences(self, db, authenticated_client, definition):
        body = authenticated_client.get(f"{BASE}/recurrences/{definition.id}/occurrences/").json()

        assert len(body) == 1
        assert body[0]["recurrenceGroupId"] == str(definition.id)

    def test_toggle(self, db, authenticated_client, definition):
        response = authenticated_client.post(
            f"{BASE}/recurrences/{definition.id}/toggle/", {"paused": True}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["recurrenceState"] == "paused"

    def test_delete_with_history(self, db, authenticated_client, account, definition):
        response = authenticated_client.delete(f"{BASE}/recurrences/{definition.id}/")

        assert response.status_code == 200
        assert response.json() == {"deleted": 2}
        assert balance_of(account) == Decimal("100.00")

    def test_unknown_definition_is_404(self, db, authenticated_client):
        response = authenticated_client.delete(f"{BASE}/recurrences/{uuid.uuid4()}/")

        assert response.status_code == 404

    def test_clearing_cadence_is_400(self, db, authenticated_client, definition):
        response = authenticated_client.patch(
            f"{BASE}/transactions/{definition.id}/", {"recurrence": None}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_RECURRENCE"
        definition.refresh_from_db()
        assert definition.recurrence == "daily"


class TestGoalViews:
    """Tests for /goals/."""

    def test_create_and_list(self, db, authenticated_client):
        created = authenticated_client.post(
            f"{BASE}/goals/",
            {"name": "Trip", "targetAmount": "3000.00", "deadline": "2024-12-01"},
            format="json",
        )

        assert created.status_code == 201
        body = created.json()
        assert body["targetAmount"] == "3000.00"
        assert body["currentAmount"] == "0.00"
        assert body["isReached"] is False

        listed = authenticated_client.get(f"{BASE}/goals/").json()
        assert [g["name"] for g in listed] == ["Trip"]

    def test_patch_progress(self, db, authenticated_client, user):
        goal = GoalFactory(user=user, target_amount=Decimal("200.00"), icon="star")

        response = authenticated_client.patch(
            f"{BASE}/goals/{goal.id}/", {"currentAmount": "250.00"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["isReached"] is True
        goal.refresh_from_db()
        assert goal.icon == "star"

    def test_zero_target_is_400(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/goals/", {"name": "Nothing", "targetAmount": "0"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_AMOUNT"

    def test_other_users_goal_is_404(self, db, other_client, user):
        goal = GoalFactory(user=user)

        response = other_client.delete(f"{BASE}/goals/{goal.id}/")

        assert response.status_code == 404
        assert response.json()["error_code"] == "GOAL_NOT_FOUND"


class TestInvestmentViews:
    """Tests for /investments/."""

    def test_create_retrieve_delete(self, db, authenticated_client):
        created = authenticated_client.post(
            f"{BASE}/investments/",
            {
                "name": "Treasury",
                "type": "bond",
                "principal": "1000.00",
                "currentValue": "1080.00",
                "returnRate": "10.5",
                "startDate": "2024-01-02",
            },
            format="json",
        )
        assert created.status_code == 201
        investment_id = created.json()["id"]

        body = authenticated_client.get(f"{BASE}/investments/{investment_id}/").json()
        assert body["gain"] == "80.00"
        assert body["returnRate"] == "10.50"
        assert body["startDate"] == "2024-01-02"

        deleted = authenticated_client.delete(f"{BASE}/investments/{investment_id}/")
        assert deleted.status_code == 204

    def test_patch_value(self, db, authenticated_client, user):
        investment = InvestmentFactory(user=user)

        response = authenticated_client.patch(
            f"{BASE}/investments/{investment.id}/", {"currentValue": "950.00"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["gain"] == "-50.00"
        assert response.json()["startDate"] == "2024-01-02"

    def test_list_is_scoped(self, db, authenticated_client, other_user):
        InvestmentFactory(user=other_user)

        assert authenticated_client.get(f"{BASE}/investments/").json() == []


class TestCreditCardViews:
    """Tests for /credit-cards/ and /invoices/."""

    def test_create_card(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/credit-cards/",
            {"name": "Visa", "limit": "5000", "closingDay": 25, "dueDay": 5},
            format="json",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["closingDay"] == 25
        assert body["usedAmount"] == "0.00"
        assert body["availableLimit"] == "5000.00"

    def test_invalid_closing_day_is_400(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/credit-cards/",
            {"name": "Visa", "limit": "5000", "closingDay": 32, "dueDay": 5},
            format="json",
        )

        assert response.status_code == 400

    def test_invoices_and_pay(self, db, authenticated_client, user, card, account, expense_input):
        ledger.create(user.id, expense_input(credit_card_id=card.id))

        invoices = authenticated_client.get(f"{BASE}/credit-cards/{card.id}/invoices/").json()
        assert [(i["referenceMonth"], i["total"]) for i in invoices] == [("2024-03", "30.00")]

        response = authenticated_client.post(
            f"{BASE}/invoices/{invoices[0]['id']}/pay/",
            {"accountId": str(account.id)},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["paid"] is True
        assert balance_of(account) == Decimal("70.00")

        again = authenticated_client.post(
            f"{BASE}/invoices/{invoices[0]['id']}/pay/",
            {"accountId": str(account.id)},
            format="json",
        )
        assert again.status_code == 409
        assert again.json()["error_code"] == "INVOICE_ALREADY_PAID"

    def test_pay_other_users_invoice_is_404(self, db, other_client, other_user, card):
        invoice = CreditCardInvoiceFactory(credit_card=card, total=Decimal("5.00"))
        foreign_account = AccountFactory(user=other_user)

        response = other_client.post(
            f"{BASE}/invoices/{invoice.id}/pay/",
            {"accountId": str(foreign_account.id)},
            format="json",
        )

        assert response.status_code == 404
        assert CreditCardInvoice.objects.get(id=invoice.id).paid is False


class TestPushTokenView:
    def test_register_twice_and_unregister(self, db, authenticated_client, user):
        payload = {"token": "ExponentPushToken[abc]", "deviceName": "Pixel"}

        for _ in range(2):
            response = authenticated_client.post(f"{BASE}/push-tokens/", payload, format="json")
            assert response.status_code == 201
        assert PushToken.objects.filter(token="ExponentPushToken[abc]").count() == 1

        response = authenticated_client.delete(
            f"{BASE}/push-tokens/", {"token": "ExponentPushToken[abc]"}, format="json"
        )
        assert response.status_code == 204

    def test_invalid_token_is_400(self, db, authenticated_client):
        response = authenticated_client.post(
            f"{BASE}/push-tokens/", {"token": "not-a-token"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_PUSH_TOKEN"

    def test_token_moves_to_new_user(self, db, authenticated_client, user, other_user):
        PushTokenFactory(user=other_user, token="ExponentPushToken[shared]")

        authenticated_client.post(
            f"{BASE}/push-tokens/", {"token": "ExponentPushToken[shared]"}, format="json"
        )

        assert PushToken.objects.get(token="ExponentPushToken[shared]").user_id == user.id


class TestCronRecurrenceView:
    """Tests for /cron/recurrences/."""

    URL = f"{BASE}/cron/recurrences/"

    def test_open_without_secret(self, db, api_client, settings):
        settings.CRON_SECRET = ""

        response = api_client.get(self.URL)

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["processed"] == 0
        assert "timestamp" in body

    def test_rejects_wrong_secret(self, db, api_client, settings):
        settings.CRON_SECRET = "s3cret"

        response = api_client.post(self.URL, HTTP_AUTHORIZATION="Bearer nope")

        assert response.status_code == 401

    def test_rejects_missing_header(self, db, api_client, settings):
        settings.CRON_SECRET = "s3cret"

        assert api_client.get(self.URL).status_code == 401

    def test_runs_sweep_with_secret(self, db, api_client, settings):
        settings.CRON_SECRET = "s3cret"

        with mock.patch.object(ledger, "run_recurrence_sweep") as sweep:
            sweep.return_value.to_dict.return_value = {
                "processed": 3,
                "finished": 1,
                "failed": 0,
            }
            response = api_client.post(self.URL, HTTP_AUTHORIZATION="Bearer s3cret")

        assert response.status_code == 200
        assert response.json()["processed"] == 3
        sweep.assert_called_once_with()
