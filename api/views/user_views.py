from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from django.core.exceptions import ObjectDoesNotExist

from ..exceptions import TransientStoreError
from ..services import UserService
from ..serializers import UserSerializer, PullRequestShortSerializer
from .errors import error_response, server_error, transient_error, validation_error
from .pull_request_views import pull_request_service


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - Установить флаг активности пользователя"""
    try:
        user_id = request.data.get('user_id')
        is_active = request.data.get('is_active')

        if not isinstance(user_id, str) or not isinstance(is_active, bool):
            return validation_error('user_id and boolean is_active are required')

        user = UserService.set_user_active_status(user_id, is_active)
        serializer = UserSerializer(user)

        return Response({
            'user': serializer.data
        })

    except ObjectDoesNotExist:
        return error_response('NOT_FOUND', 'User not found', status.HTTP_404_NOT_FOUND)
    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('user_set_active')


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - Получить PR'ы, где пользователь назначен ревьювером"""
    try:
        user_id = request.query_params.get('user_id')

        if not user_id:
            return validation_error('user_id parameter is required')

        assigned_prs = pull_request_service.list_pull_requests_by_reviewer(user_id)
        serializer = PullRequestShortSerializer(assigned_prs, many=True)

        return Response({
            'user_id': user_id,
            'pull_requests': serializer.data
        })

    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('users_get_review')
