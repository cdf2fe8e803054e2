"""
API views for the finance app.

Thin HTTP layer: views validate the payload shape with serializers, call
the services with ``request.user.id`` and serialize the result. Domain
errors propagate to core.views.application_exception_handler, which maps
them to 400/404/409/503.

Endpoints (prefixed with /api/v1/finance/):
    accounts/                          GET, POST
    accounts/{id}/                     GET, PATCH, DELETE
    categories/                        GET, POST
    categories/{id}/                   PATCH, DELETE
    transactions/                      GET, POST
    transactions/{id}/                 GET, PATCH, DELETE
    transfers/                         POST
    recurrences/                       GET
    recurrences/{id}/                  DELETE (with history)
    recurrences/{id}/toggle/           POST
    recurrences/{id}/occurrences/      GET
    credit-cards/                      GET, POST
    credit-cards/{id}/                 GET, PATCH, DELETE
    credit-cards/{id}/invoices/        GET
    invoices/{id}/pay/                 POST
    goals/                             GET, POST
    goals/{id}/                        GET, PATCH, DELETE
    investments/                       GET, POST
    investments/{id}/                  GET, PATCH, DELETE
    push-tokens/                       POST, DELETE
    cron/recurrences/                  GET, POST (CRON_SECRET bearer token)
"""

from __future__ import annotations

import hmac
import logging

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
    CategorySerializer,
    CategoryUpdateSerializer,
    CreditCardCreateSerializer,
    CreditCardSerializer,
    CreditCardUpdateSerializer,
    GoalInputSerializer,
    GoalSerializer,
    InvestmentInputSerializer,
    InvestmentSerializer,
    InvoiceSerializer,
    PayInvoiceSerializer,
    PushTokenSerializer,
    RecurrencePauseSerializer,
    TransactionCreateSerializer,
    TransactionSerializer,
    TransactionUpdateSerializer,
    TransferSerializer,
)
from .services import accounts, credit_cards, ledger, planning, push_tokens

logger = logging.getLogger(__name__)

UUID_LOOKUP = r"[0-9a-fA-F-]{36}"


# =============================================================================
# Accounts and Categories
# =============================================================================


@extend_schema_view(
    list=extend_schema(summary="List accounts", tags=["Finance - Accounts"]),
    create=extend_schema(
        summary="Create account",
        tags=["Finance - Accounts"],
        request=AccountCreateSerializer,
        responses=AccountSerializer,
    ),
    retrieve=extend_schema(summary="Get account", tags=["Finance - Accounts"]),
    partial_update=extend_schema(
        summary="Rename or retype account",
        tags=["Finance - Accounts"],
        request=AccountUpdateSerializer,
        responses=AccountSerializer,
    ),
    destroy=extend_schema(summary="Delete account", tags=["Finance - Accounts"]),
)
class AccountViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountSerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = accounts.list_accounts(request.user.id)
        return Response(AccountSerializer(queryset, many=True).data)

    def create(self, request):
        serializer = AccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        account = accounts.create_account(request.user.id, **serializer.validated_data)
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        account = accounts.get_account(pk, request.user.id)
        return Response(AccountSerializer(account).data)

    def partial_update(self, request, pk=None):
        serializer = AccountUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        account = accounts.update_account(pk, request.user.id, **serializer.validated_data)
        return Response(AccountSerializer(account).data)

    def destroy(self, request, pk=None):
        accounts.delete_account(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(summary="List categories", tags=["Finance - Categories"]),
    create=extend_schema(summary="Create category", tags=["Finance - Categories"]),
    partial_update=extend_schema(
        summary="Update category",
        tags=["Finance - Categories"],
        request=CategoryUpdateSerializer,
        responses=CategorySerializer,
    ),
    destroy=extend_schema(summary="Delete category", tags=["Finance - Categories"]),
)
class CategoryViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = CategorySerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = accounts.list_categories(
            request.user.id, type=request.query_params.get("type")
        )
        return Response(CategorySerializer(queryset, many=True).data)

    def create(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = accounts.create_category(request.user.id, **serializer.validated_data)
        return Response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = CategoryUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = accounts.update_category(pk, request.user.id, **serializer.validated_data)
        return Response(CategorySerializer(category).data)

    def destroy(self, request, pk=None):
        accounts.delete_category(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Transactions and Transfers
# =============================================================================


@extend_schema_view(
    list=extend_schema(summary="List transactions", tags=["Finance - Transactions"]),
    create=extend_schema(
        summary="Create transaction",
        tags=["Finance - Transactions"],
        request=TransactionCreateSerializer,
        responses=TransactionSerializer,
    ),
    retrieve=extend_schema(summary="Get transaction", tags=["Finance - Transactions"]),
    partial_update=extend_schema(
        summary="Update transaction",
        tags=["Finance - Transactions"],
        request=TransactionUpdateSerializer,
        responses=TransactionSerializer,
    ),
    destroy=extend_schema(summary="Delete transaction", tags=["Finance - Transactions"]),
)
class TransactionViewSet(viewsets.ViewSet):
    """
    create:
        Records the transaction and applies its balance or invoice effect.

    partial_update:
        Reverses the stored effect and applies the updated one.

    destroy:
        Deletes the row and reverses its effect.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = TransactionSerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = ledger.list_transactions(request.user.id)
        return Response(TransactionSerializer(queryset, many=True).data)

    def create(self, request):
        serializer = TransactionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        transaction = ledger.create(request.user.id, serializer.to_input())
        return Response(
            TransactionSerializer(transaction).data, status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        transaction = ledger.get_transaction(pk, request.user.id)
        return Response(TransactionSerializer(transaction).data)

    def partial_update(self, request, pk=None):
        serializer = TransactionUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        transaction = ledger.update(pk, request.user.id, serializer.to_patch())
        return Response(TransactionSerializer(transaction).data)

    def destroy(self, request, pk=None):
        ledger.delete(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TransferView(APIView):
    """
    Move money between two of the user's accounts.

    POST /api/v1/finance/transfers/

    Request body:
        {"fromAccountId": "...", "toAccountId": "...", "amount": "200.00"}

    Returns:
        {"outgoing": {...}, "incoming": {...}}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Transfer between accounts",
        tags=["Finance - Transactions"],
        request=TransferSerializer,
    )
    def post(self, request):
        serializer = TransferSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = ledger.transfer(request.user.id, **serializer.validated_data)
        return Response(
            {
                "outgoing": TransactionSerializer(result.outgoing).data,
                "incoming": TransactionSerializer(result.incoming).data,
            },
            status=status.HTTP_201_CREATED,
        )


# =============================================================================
# Recurrences
# =============================================================================


@extend_schema_view(
    list=extend_schema(summary="List recurring definitions", tags=["Finance - Recurrences"]),
    destroy=extend_schema(
        summary="Delete definition with all its occurrences",
        tags=["Finance - Recurrences"],
    ),
)
class RecurrenceViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = TransactionSerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = ledger.list_definitions(request.user.id)
        return Response(TransactionSerializer(queryset, many=True).data)

    def destroy(self, request, pk=None):
        deleted = ledger.delete_with_history(pk, request.user.id)
        return Response({"deleted": deleted})

    @extend_schema(
        summary="Pause or resume a definition",
        tags=["Finance - Recurrences"],
        request=RecurrencePauseSerializer,
        responses=TransactionSerializer,
    )
    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        serializer = RecurrencePauseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        definition = ledger.toggle_pause(
            pk, request.user.id, serializer.validated_data["paused"]
        )
        return Response(TransactionSerializer(definition).data)

    @extend_schema(
        summary="List occurrences of a definition",
        tags=["Finance - Recurrences"],
        responses=TransactionSerializer(many=True),
    )
    @action(detail=True, methods=["get"])
    def occurrences(self, request, pk=None):
        queryset = ledger.list_occurrences(pk, request.user.id)
        return Response(TransactionSerializer(queryset, many=True).data)


# =============================================================================
# Credit Cards and Invoices
# =============================================================================


@extend_schema_view(
    list=extend_schema(summary="List credit cards", tags=["Finance - Credit Cards"]),
    create=extend_schema(
        summary="Create credit card",
        tags=["Finance - Credit Cards"],
        request=CreditCardCreateSerializer,
        responses=CreditCardSerializer,
    ),
    retrieve=extend_schema(summary="Get credit card", tags=["Finance - Credit Cards"]),
    partial_update=extend_schema(
        summary="Update credit card",
        tags=["Finance - Credit Cards"],
        request=CreditCardUpdateSerializer,
        responses=CreditCardSerializer,
    ),
    destroy=extend_schema(summary="Delete credit card", tags=["Finance - Credit Cards"]),
)
class CreditCardViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = CreditCardSerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = credit_cards.list_cards(request.user.id)
        return Response(CreditCardSerializer(queryset, many=True).data)

    def create(self, request):
        serializer = CreditCardCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        card = credit_cards.create_card(request.user.id, **serializer.validated_data)
        return Response(CreditCardSerializer(card).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        card = credit_cards.get_card(pk, request.user.id)
        return Response(CreditCardSerializer(card).data)

    def partial_update(self, request, pk=None):
        serializer = CreditCardUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        card = credit_cards.update_card(pk, request.user.id, **serializer.validated_data)
        return Response(CreditCardSerializer(card).data)

    def destroy(self, request, pk=None):
        credit_cards.delete_card(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        summary="List invoices of a card",
        tags=["Finance - Credit Cards"],
        responses=InvoiceSerializer(many=True),
    )
    @action(detail=True, methods=["get"])
    def invoices(self, request, pk=None):
        queryset = credit_cards.list_invoices(pk, request.user.id)
        return Response(InvoiceSerializer(queryset, many=True).data)


class InvoiceViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceSerializer
    lookup_value_regex = UUID_LOOKUP

    @extend_schema(
        summary="Pay an invoice from an account",
        tags=["Finance - Credit Cards"],
        request=PayInvoiceSerializer,
        responses=InvoiceSerializer,
    )
    @action(detail=True, methods=["post"])
    def pay(self, request, pk=None):
        serializer = PayInvoiceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice = credit_cards.pay_invoice(
            pk, request.user.id, serializer.validated_data["account_id"]
        )
        return Response(InvoiceSerializer(invoice).data)


# =============================================================================
# Goals and Investments
# =============================================================================


@extend_schema_view(
    list=extend_schema(summary="List goals", tags=["Finance - Goals"]),
    create=extend_schema(
        summary="Create goal",
        tags=["Finance - Goals"],
        request=GoalInputSerializer,
        responses=GoalSerializer,
    ),
    retrieve=extend_schema(summary="Get goal", tags=["Finance - Goals"]),
    partial_update=extend_schema(
        summary="Update goal",
        tags=["Finance - Goals"],
        request=GoalInputSerializer,
        responses=GoalSerializer,
    ),
    destroy=extend_schema(summary="Delete goal", tags=["Finance - Goals"]),
)
class GoalViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = GoalSerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = planning.list_goals(request.user.id)
        return Response(GoalSerializer(queryset, many=True).data)

    def create(self, request):
        serializer = GoalInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        goal = planning.create_goal(request.user.id, **serializer.validated_data)
        return Response(GoalSerializer(goal).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        goal = planning.get_goal(pk, request.user.id)
        return Response(GoalSerializer(goal).data)

    def partial_update(self, request, pk=None):
        serializer = GoalInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        goal = planning.update_goal(pk, request.user.id, **serializer.validated_data)
        return Response(GoalSerializer(goal).data)

    def destroy(self, request, pk=None):
        planning.delete_goal(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(summary="List investments", tags=["Finance - Investments"]),
    create=extend_schema(
        summary="Create investment",
        tags=["Finance - Investments"],
        request=InvestmentInputSerializer,
        responses=InvestmentSerializer,
    ),
    retrieve=extend_schema(summary="Get investment", tags=["Finance - Investments"]),
    partial_update=extend_schema(
        summary="Update investment",
        tags=["Finance - Investments"],
        request=InvestmentInputSerializer,
        responses=InvestmentSerializer,
    ),
    destroy=extend_schema(summary="Delete investment", tags=["Finance - Investments"]),
)
class InvestmentViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = InvestmentSerializer
    lookup_value_regex = UUID_LOOKUP

    def list(self, request):
        queryset = planning.list_investments(request.user.id)
        return Response(InvestmentSerializer(queryset, many=True).data)

    def create(self, request):
        serializer = InvestmentInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        investment = planning.create_investment(request.user.id, **serializer.validated_data)
        return Response(InvestmentSerializer(investment).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        investment = planning.get_investment(pk, request.user.id)
        return Response(InvestmentSerializer(investment).data)

    def partial_update(self, request, pk=None):
        serializer = InvestmentInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        investment = planning.update_investment(
            pk, request.user.id, **serializer.validated_data
        )
        return Response(InvestmentSerializer(investment).data)

    def destroy(self, request, pk=None):
        planning.delete_investment(pk, request.user.id)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Push Tokens
# =============================================================================


class PushTokenView(APIView):
    """
    Register or unregister an Expo push token.

    POST   /api/v1/finance/push-tokens/  {"token": "ExponentPushToken[...]"}
    DELETE /api/v1/finance/push-tokens/  {"token": "ExponentPushToken[...]"}
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Register push token", tags=["Finance - Push"], request=PushTokenSerializer)
    def post(self, request):
        serializer = PushTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        push_tokens.register(request.user.id, **serializer.validated_data)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @extend_schema(summary="Unregister push token", tags=["Finance - Push"], request=PushTokenSerializer)
    def delete(self, request):
        serializer = PushTokenSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        push_tokens.unregister(request.user.id, serializer.validated_data["token"])
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Cron
# =============================================================================


class CronRecurrenceView(APIView):
    """
    Run the recurrence sweep from an external scheduler.

    GET|POST /api/v1/finance/cron/recurrences/

    Requires ``Authorization: Bearer <CRON_SECRET>`` when CRON_SECRET is
    set. Returns the sweep counters.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def _authorized(self, request) -> bool:
        secret = settings.CRON_SECRET
        if not secret:
            return True
        header = request.headers.get("Authorization", "")
        return hmac.compare_digest(header, f"Bearer {secret}")

    @extend_schema(summary="Run recurrence sweep", tags=["Finance - Cron"], request=None)
    def get(self, request):
        if not self._authorized(request):
            logger.warning("Rejected cron call with bad secret")
            return Response({"error": "Unauthorized"}, status=status.HTTP_401_UNAUTHORIZED)

        result = ledger.run_recurrence_sweep()
        return Response(
            {"ok": True, **result.to_dict(), "timestamp": timezone.now().isoformat()}
        )

    post = get
