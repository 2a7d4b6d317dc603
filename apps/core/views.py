from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from apps.accounts.permissions import IsSuperAdmin, HasSettingsAccess
from .serializers import (
    HistoryFilterSerializer,
    HistoryEntrySerializer,
    SettingUpsertSerializer,
    SettingValueSerializer,
    SettingSerializer,
)
from .services import (
    list_history,
    list_settings,
    get_setting,
    upsert_setting,
    update_setting,
    delete_setting,
    SettingNotFoundError,
)


class HistoryPagination(PageNumberPagination):
    """Custom pagination for audit history."""
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


@extend_schema(
    parameters=[
        OpenApiParameter('collection_name', OpenApiTypes.STR, description="Document type, e.g. 'dailyTrips'"),
        OpenApiParameter('document_id', OpenApiTypes.STR, description='Affected document id'),
        OpenApiParameter('action', OpenApiTypes.STR, description='create, update or delete'),
    ],
    responses={200: HistoryEntrySerializer(many=True)},
    description="Audit trail of changes to business documents (super admin only).",
    tags=['history'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSuperAdmin])
def history_list(request):
    """List audit history - thin HTTP handler."""
    filter_serializer = HistoryFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    queryset = list_history(**filter_serializer.validated_data)

    paginator = HistoryPagination()
    page = paginator.paginate_queryset(queryset, request)
    serializer = HistoryEntrySerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    methods=['GET'],
    responses={200: SettingSerializer(many=True)},
    description="List all application settings.",
    tags=['settings'],
)
@extend_schema(
    methods=['POST'],
    request=SettingUpsertSerializer,
    responses={200: SettingSerializer, 201: SettingSerializer},
    description="Create a setting, or overwrite its value if the key exists.",
    tags=['settings'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasSettingsAccess])
def setting_list(request):
    """List or upsert settings."""
    if request.method == 'GET':
        return Response(SettingSerializer(list_settings(), many=True).data)

    serializer = SettingUpsertSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    setting, created = upsert_setting(
        key=serializer.validated_data['key'],
        value=serializer.validated_data['value'],
        user=request.user,
    )
    return Response(
        SettingSerializer(setting).data,
        status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
    )


@extend_schema(
    methods=['GET'],
    responses={200: SettingSerializer},
    description="Get a single setting by key.",
    tags=['settings'],
)
@extend_schema(
    methods=['PUT', 'PATCH'],
    request=SettingValueSerializer,
    responses={200: SettingSerializer},
    description="Replace the value of an existing setting.",
    tags=['settings'],
)
@extend_schema(
    methods=['DELETE'],
    responses={204: None},
    description="Delete a setting.",
    tags=['settings'],
)
@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, HasSettingsAccess])
def setting_detail(request, key):
    """Retrieve, update or delete a setting."""
    try:
        if request.method == 'GET':
            return Response(SettingSerializer(get_setting(key=key)).data)

        if request.method == 'DELETE':
            delete_setting(key=key, user=request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = SettingValueSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        setting = update_setting(
            key=key,
            value=serializer.validated_data['value'],
            user=request.user,
        )
        return Response(SettingSerializer(setting).data)
    except SettingNotFoundError as e:
        return Response({'error': str(e)}, status=status.HTTP_404_NOT_FOUND)
