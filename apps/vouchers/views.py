import logging
from datetime import timedelta

from django.db import DatabaseError
from django.db.models import Q
from django.http import HttpResponse
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsCafeAdmin
from apps.accounts.services import (
    AccountsServiceError,
    UnauthenticatedError,
    NotCafeAdminError,
    UserNotFoundError,
    is_cafe_admin,
    require_cafe_admin,
)

from .models import Voucher, VoucherStatus
from .permissions import IsVoucherOwnerOrCafeAdmin
from .serializers import (
    VoucherSerializer,
    RedeemedVoucherSerializer,
    RedeemVoucherInputSerializer,
    GiftVoucherInputSerializer,
    BirthdayBatchInputSerializer,
    UpcomingBirthdaysFilterSerializer,
    VoucherFilterSerializer,
    RedeemResponseSerializer,
    BirthdayBatchResponseSerializer,
    UpcomingBirthdaySerializer,
)
from .services import (
    redeem_voucher,
    gift_voucher,
    run_birthday_batch,
    upcoming_birthdays,
    render_voucher_qr,
    # Exceptions
    VouchersServiceError,
    VoucherNotFoundError,
    VoucherAlreadyRedeemedError,
    VoucherExpiredError,
    InvalidVoucherCodeError,
    InvalidVoucherReasonError,
    InvalidValidityError,
    DuplicateVoucherCodeError,
    VoucherStoreError,
)

logger = logging.getLogger(__name__)

GENERIC_REDEEM_ERROR = 'An error occurred while redeeming the voucher.'
GENERIC_ISSUE_ERROR = 'An error occurred while creating the voucher.'
INVALID_CODE_ERROR = 'A valid voucher code is required.'

SERVICE_ERROR_STATUS = (
    (UnauthenticatedError, status.HTTP_401_UNAUTHORIZED),
    (NotCafeAdminError, status.HTTP_403_FORBIDDEN),
    (VoucherNotFoundError, status.HTTP_404_NOT_FOUND),
    (UserNotFoundError, status.HTTP_404_NOT_FOUND),
    (VoucherAlreadyRedeemedError, status.HTTP_400_BAD_REQUEST),
    (VoucherExpiredError, status.HTTP_400_BAD_REQUEST),
    (InvalidVoucherCodeError, status.HTTP_400_BAD_REQUEST),
    (InvalidVoucherReasonError, status.HTTP_400_BAD_REQUEST),
    (InvalidValidityError, status.HTTP_400_BAD_REQUEST),
)


def service_error_response(error, generic_message):
    """Map a service exception to an error response; unknown ones become a generic 500."""
    for error_class, status_code in SERVICE_ERROR_STATUS:
        if isinstance(error, error_class):
            return Response({'error': str(error)}, status=status_code)
    return Response({'error': generic_message}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


class VoucherPagination(PageNumberPagination):
    """Custom pagination for vouchers."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class VoucherViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for reading vouchers.

    list: The current user's vouchers (filter with ?status=active|used|expired)
    retrieve: One voucher by code (owner or admin)
    qr: PNG QR code for a voucher (owner or admin)
    """

    serializer_class = VoucherSerializer
    permission_classes = [IsAuthenticated, IsVoucherOwnerOrCafeAdmin]
    pagination_class = VoucherPagination
    lookup_field = 'code'
    lookup_value_regex = '[A-Za-z0-9-]+'

    def get_queryset(self):
        """Own vouchers for list; admins may open any voucher by code."""
        queryset = Voucher.objects.all()
        if self.action == 'list' or not is_cafe_admin(self.request.user):
            queryset = queryset.filter(user=self.request.user)

        if self.action == 'list':
            filter_serializer = VoucherFilterSerializer(data=self.request.query_params)
            filter_serializer.is_valid(raise_exception=True)
            voucher_status = filter_serializer.validated_data.get('status')

            now = timezone.now()
            not_expired = Q(expires_at__isnull=True) | Q(expires_at__gte=now)
            if voucher_status == VoucherStatus.ACTIVE:
                queryset = queryset.filter(not_expired, is_used=False)
            elif voucher_status == VoucherStatus.USED:
                queryset = queryset.filter(is_used=True)
            elif voucher_status == VoucherStatus.EXPIRED:
                queryset = queryset.filter(is_used=False, expires_at__lt=now)

        return queryset

    def get_object(self):
        self.kwargs[self.lookup_field] = self.kwargs[self.lookup_field].upper()
        return super().get_object()

    @extend_schema(
        responses={(200, 'image/png'): OpenApiTypes.BINARY},
        description="QR code (PNG) encoding the voucher code, for staff to scan.",
        tags=['vouchers'],
    )
    @action(detail=True, methods=['get'])
    def qr(self, request, code=None):
        """
        Get the voucher's QR code.

        GET /api/vouchers/{code}/qr/
        """
        voucher = self.get_object()
        return HttpResponse(render_voucher_qr(voucher), content_type='image/png')


@extend_schema(
    request=RedeemVoucherInputSerializer,
    responses={
        200: RedeemResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
        500: ErrorResponseSerializer,
    },
    description="Redeem a scanned voucher code (café admins only).",
    tags=['vouchers'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def redeem(request):
    """
    Redeem a voucher.

    POST /api/vouchers/redeem
    Body: {"voucherCode": "LOKAL-GIFT-..."}
    """
    # Staff check comes before the body is read
    try:
        require_cafe_admin(request.user)
    except AccountsServiceError as e:
        return service_error_response(e, GENERIC_REDEEM_ERROR)

    input_serializer = RedeemVoucherInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return Response({'error': INVALID_CODE_ERROR}, status=status.HTTP_400_BAD_REQUEST)

    try:
        voucher = redeem_voucher(
            code=input_serializer.validated_data.get('voucherCode', ''),
            acting_user=request.user,
        )
    except (VouchersServiceError, AccountsServiceError) as e:
        return service_error_response(e, GENERIC_REDEEM_ERROR)
    except DatabaseError:
        logger.exception("Store failure in redeem view")
        return Response({'error': GENERIC_REDEEM_ERROR}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'message': 'Voucher redeemed successfully.',
        'voucherCode': voucher.code,
        'voucher': RedeemedVoucherSerializer(voucher).data,
    })


@extend_schema(
    request=GiftVoucherInputSerializer,
    responses={
        201: VoucherSerializer,
        400: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
        404: ErrorResponseSerializer,
    },
    description="Gift a voucher to a member and notify them by email and/or SMS (café admins only).",
    tags=['vouchers'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def gift(request):
    """
    Gift a voucher.

    POST /api/vouchers/gift/
    """
    serializer = GiftVoucherInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    validity_days = data.get('validity_days')

    try:
        voucher = gift_voucher(
            user_id=data['user_id'],
            issued_by=request.user,
            reason=data['reason'],
            validity=timedelta(days=validity_days) if validity_days else None,
            message=data['message'],
            send_email=data['send_email'],
            send_sms=data['send_sms'],
        )
    except (VouchersServiceError, AccountsServiceError) as e:
        if isinstance(e, DuplicateVoucherCodeError):
            logger.error("Gift voucher failed: %s", e)
        return service_error_response(e, GENERIC_ISSUE_ERROR)

    return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)


@extend_schema(
    request=BirthdayBatchInputSerializer,
    responses={200: BirthdayBatchResponseSerializer},
    description="Issue birthday vouchers to members celebrating on the given date (default today). Safe to run repeatedly.",
    tags=['vouchers'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsCafeAdmin])
def run_birthdays(request):
    """
    Run the birthday batch.

    POST /api/vouchers/birthdays/run/
    """
    serializer = BirthdayBatchInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = run_birthday_batch(
            today=serializer.validated_data.get('date'),
            notify=serializer.validated_data['notify'],
            issued_by=request.user,
        )
    except VouchersServiceError as e:
        logger.error("Birthday batch failed: %s", e)
        return service_error_response(e, GENERIC_ISSUE_ERROR)

    return Response(BirthdayBatchResponseSerializer({
        'date': result['date'],
        'issued_count': len(result['issued']),
        'skipped_count': len(result['skipped']),
        'issued': result['issued'],
        'skipped': result['skipped'],
    }).data)


@extend_schema(
    parameters=[
        OpenApiParameter('days', int, description='Look-ahead window in days (default 7)'),
    ],
    responses={200: UpcomingBirthdaySerializer(many=True)},
    description="Birthday tracker: members celebrating today or within the next days.",
    tags=['vouchers'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsCafeAdmin])
def birthdays_upcoming(request):
    """
    List upcoming birthdays.

    GET /api/vouchers/birthdays/upcoming/?days=7
    """
    filter_serializer = UpcomingBirthdaysFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    entries = upcoming_birthdays(days=filter_serializer.validated_data['days'])
    return Response(UpcomingBirthdaySerializer(entries, many=True).data)
