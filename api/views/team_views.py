from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from django.core.exceptions import ValidationError, ObjectDoesNotExist

from ..exceptions import TransientStoreError
from ..services import TeamService
from ..serializers import TeamSerializer
from .errors import error_response, server_error, transient_error, validation_error


def _is_valid_member(member):
    return (
        isinstance(member['user_id'], str)
        and isinstance(member['username'], str)
        and isinstance(member['is_active'], bool)
    )


@api_view(['POST'])
def team_add(request):
    """POST /team/add - Создать команду с участниками"""
    try:
        team_name = request.data.get('team_name')
        members_data = request.data.get('members', [])

        if not team_name or not isinstance(team_name, str):
            return validation_error('team_name is required')

        if not isinstance(members_data, list):
            return validation_error('members must be a list')

        for i, member in enumerate(members_data):
            if not isinstance(member, dict) or not all(key in member for key in ['user_id', 'username', 'is_active']):
                return validation_error(f'Member at index {i} is missing required fields')
            if not _is_valid_member(member):
                return validation_error(
                    f'Member at index {i} needs string user_id and username and boolean is_active'
                )

        team = TeamService.create_team_with_members(team_name, members_data)
        serializer = TeamSerializer(team)

        return Response({
            'team': serializer.data
        }, status=status.HTTP_201_CREATED)

    except ValidationError as e:
        return error_response(e.code, e.message, status.HTTP_400_BAD_REQUEST)
    except TransientStoreError:
        return transient_error()
    except Exception:
        return server_error('team_add')


@api_view(['GET'])
def team_get(request):
    """GET /team/get - Получить команду с участниками"""
    try:
        team_name = request.query_params.get('team_name')

        if not team_name:
            return validation_error('team_name parameter is required')

        team = TeamService.get_team_with_members(team_name)
        serializer = TeamSerializer(team)

        return Response(serializer.data)

    except ObjectDoesNotExist:
        return error_response('NOT_FOUND', 'Team not found', status.HTTP_404_NOT_FOUND)
    except Exception:
        return server_error('team_get')
