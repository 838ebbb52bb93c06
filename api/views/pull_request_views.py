from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from django.core.exceptions import ObjectDoesNotExist, ValidationError

from ..exceptions import TransientStoreError
from ..services import PullRequestService
from ..serializers import PullRequestSerializer
from .errors import error_response, server_error, transient_error, validation_error

pull_request_service = PullRequestService()


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - Создать PR и назначить ревьюверов"""
    try:
        pr_id = request.data.get('pull_request_id')
        pr_name = request.data.get('pull_request_name')
        author_id = request.data.get('author_id')

        if not all(isinstance(value, str) and value for value in [pr_id, pr_name, author_id]):
            return validation_error('pull_request_id, pull_request_name, and author_id are required')

        pr = pull_request_service.create_pull_request(pr_id, pr_name, author_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        }, status=status.HTTP_201_CREATED)

    except ObjectDoesNotExist as e:
        return error_response('NOT_FOUND', str(e), status.HTTP_404_NOT_FOUND)
    except ValidationError as e:
        return error_response(e.code, e.message, status.HTTP_409_CONFLICT)
    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('pullrequest_create')


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - Пометить PR как MERGED (идемпотентно)"""
    try:
        pr_id = request.data.get('pull_request_id')

        if not pr_id or not isinstance(pr_id, str):
            return validation_error('pull_request_id is required')

        pr = pull_request_service.merge_pull_request(pr_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        })

    except ObjectDoesNotExist as e:
        return error_response('NOT_FOUND', str(e), status.HTTP_404_NOT_FOUND)
    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('pullrequest_merge')


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - Переназначить ревьювера"""
    try:
        pr_id = request.data.get('pull_request_id')
        old_user_id = request.data.get('old_user_id')

        if not all(isinstance(value, str) and value for value in [pr_id, old_user_id]):
            return validation_error('pull_request_id and old_user_id are required')

        pr, new_reviewer_id = pull_request_service.reassign_reviewer(pr_id, old_user_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data,
            'replaced_by': new_reviewer_id
        })

    except ObjectDoesNotExist as e:
        return error_response('NOT_FOUND', str(e), status.HTTP_404_NOT_FOUND)
    except ValidationError as e:
        return error_response(e.code, e.message, status.HTTP_409_CONFLICT)
    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('pullrequest_reassign')


@api_view(['GET'])
def pullrequest_get(request):
    """GET /pullRequest/get - Получить PR с ревьюверами в порядке назначения"""
    try:
        pr_id = request.query_params.get('pull_request_id')

        if not pr_id:
            return validation_error('pull_request_id parameter is required')

        pr = pull_request_service.get_pull_request(pr_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        })

    except ObjectDoesNotExist as e:
        return error_response('NOT_FOUND', str(e), status.HTTP_404_NOT_FOUND)
    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('pullrequest_get')
