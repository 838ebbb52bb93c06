"""
Доменные ошибки сервиса назначения ревьюверов.

"Не найдено" наследуются от ObjectDoesNotExist, конфликты состояния от
ValidationError с кодом, поэтому вьюхи обрабатывают их одинаково с
остальными ошибками Django.
"""
from django.core.exceptions import ObjectDoesNotExist, ValidationError


class DomainConflict(ValidationError):
    default_message = 'conflict'
    default_code = 'CONFLICT'

    def __init__(self, message=None):
        super().__init__(message or self.default_message, code=self.default_code)


class TeamAlreadyExists(DomainConflict):
    default_message = 'team_name already exists'
    default_code = 'TEAM_EXISTS'


class PullRequestAlreadyExists(DomainConflict):
    default_message = 'PR id already exists'
    default_code = 'PR_EXISTS'


class PullRequestAlreadyMerged(DomainConflict):
    default_message = 'cannot reassign on merged PR'
    default_code = 'PR_MERGED'


class ReviewerNotAssigned(DomainConflict):
    default_message = 'reviewer is not assigned to this PR'
    default_code = 'NOT_ASSIGNED'


class NoEligibleCandidate(DomainConflict):
    default_message = 'no active replacement candidate in team'
    default_code = 'NO_CANDIDATE'


class TeamNotFound(ObjectDoesNotExist):
    pass


class UserNotFound(ObjectDoesNotExist):
    pass


class AuthorNotFound(UserNotFound):
    pass


class PullRequestNotFound(ObjectDoesNotExist):
    pass


class EmptyCandidatePool(ValueError):
    """Селектор вызван с пустым пулом: ошибка в логике вызывающего кода"""


class TransientStoreError(Exception):
    """Сбой или конфликт записи в БД; операцию можно повторить целиком"""
