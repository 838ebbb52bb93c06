import functools
import logging

from django.db import DatabaseError, IntegrityError, InterfaceError, OperationalError, connection, transaction
from django.db.models import Prefetch
from django.utils import timezone

from .exceptions import (
    AuthorNotFound,
    NoEligibleCandidate,
    PullRequestAlreadyExists,
    PullRequestAlreadyMerged,
    PullRequestNotFound,
    ReviewerNotAssigned,
    TeamAlreadyExists,
    TeamNotFound,
    TransientStoreError,
    UserNotFound,
)
from .models import PullRequest, ReviewerAssignment, Team, User
from .selector import ReviewerSelector

logger = logging.getLogger('pullrequester.services')

MAX_REVIEWERS = 2

# SQLSTATE unique_violation в PostgreSQL
UNIQUE_VIOLATION = '23505'


def _is_unique_violation(exc: IntegrityError) -> bool:
    # psycopg отдает SQLSTATE в исходной ошибке, sqlite только текст сообщения
    sqlstate = getattr(exc.__cause__, 'sqlstate', None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION
    return 'UNIQUE constraint failed' in str(exc)


def is_transient_store_error(exc: DatabaseError) -> bool:
    """
    Временными считаются обрыв соединения, конфликт сериализации, блокировка
    и гонка по уникальному ключу. NOT NULL, CHECK и ошибки данных повтором
    не лечатся.
    """
    if isinstance(exc, (OperationalError, InterfaceError)):
        return True
    if isinstance(exc, IntegrityError):
        return _is_unique_violation(exc)
    return False


def transient_store_errors(func):
    """
    Временные сбои БД при записи превращаются в TransientStoreError.
    Доменные и постоянные ошибки БД пробрасываются как есть.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            if not is_transient_store_error(exc):
                raise
            logger.warning("%s failed on store error: %s", func.__name__, exc)
            raise TransientStoreError(str(exc)) from exc
    return wrapper


def retry_read_once(func):
    """
    Чтение без побочных эффектов повторяется один раз при сбое соединения.
    Вне транзакции старое соединение закрывается, и повтор идет через новое.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.warning("%s failed, retrying once: %s", func.__name__, exc)
            if not connection.in_atomic_block:
                connection.close()
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            raise TransientStoreError(str(exc)) from exc
    return wrapper


class TeamService:
    """
    Сервис для управления командами и пользователями
    """

    @classmethod
    @transient_store_errors
    @transaction.atomic
    def create_team_with_members(cls, team_name: str, members_data: list) -> Team:
        """
        Создает команду и добавляет/обновляет её участников.
        Повтор имени команды определяется по уникальному индексу, без предварительной проверки.
        """
        try:
            team = Team.objects.create(name=team_name)
        except IntegrityError:
            raise TeamAlreadyExists()

        upserted = 0
        for member_data in members_data:
            if not member_data.get('user_id'):
                continue
            cls._create_or_update_user(team, member_data)
            upserted += 1

        logger.info("Team %s created with %d members", team_name, upserted)
        return cls.get_team_with_members(team_name)

    @classmethod
    def _create_or_update_user(cls, team: Team, member_data: dict) -> User:
        # Существующий пользователь переезжает в новую команду
        user, _ = User.objects.update_or_create(
            id=member_data['user_id'],
            defaults={
                'username': member_data['username'],
                'is_active': member_data['is_active'],
                'team': team,
            },
        )
        return user

    @classmethod
    def get_team_with_members(cls, team_name: str) -> Team:
        members = User.objects.order_by('username', 'id')
        try:
            return Team.objects.prefetch_related(Prefetch('members', queryset=members)).get(name=team_name)
        except Team.DoesNotExist:
            raise TeamNotFound(f"Team '{team_name}' not found")


class UserService:
    """
    Сервис для управления пользователями
    """

    @classmethod
    @transient_store_errors
    def set_user_active_status(cls, user_id: str, is_active: bool) -> User:
        try:
            user = User.objects.select_related('team').get(id=user_id)
        except User.DoesNotExist:
            raise UserNotFound(f"User '{user_id}' not found")

        user.is_active = is_active
        user.save(update_fields=['is_active', 'updated_at'])
        logger.info("User %s is_active set to %s", user_id, is_active)
        return user


class PullRequestService:
    """
    Движок назначения ревьюверов.

    Каждая изменяющая операция выполняется одной транзакцией: чтение состояния,
    решение, запись. Источник случайности приходит через ReviewerSelector.
    """

    def __init__(self, selector: ReviewerSelector = None):
        self.selector = selector if selector is not None else ReviewerSelector()

    @transient_store_errors
    @transaction.atomic
    def create_pull_request(self, pr_id: str, pr_name: str, author_id: str) -> PullRequest:
        try:
            author = User.objects.select_related('team').get(id=author_id)
        except User.DoesNotExist:
            raise AuthorNotFound(f"Author '{author_id}' not found")

        # Дубликат id ловим по первичному ключу, а не проверкой перед вставкой
        try:
            pr = PullRequest.objects.create(
                id=pr_id,
                name=pr_name,
                author=author,
                team=author.team,
            )
        except IntegrityError:
            raise PullRequestAlreadyExists()

        pool = list(
            User.objects.active_teammates(author.team_id, exclude_ids=[author.id])
            .values_list('id', flat=True)
        )
        reviewer_ids = self._draw_reviewers(pool, MAX_REVIEWERS)

        assigned_at = timezone.now()
        ReviewerAssignment.objects.bulk_create([
            ReviewerAssignment(pull_request=pr, reviewer_id=reviewer_id, assigned_at=assigned_at)
            for reviewer_id in reviewer_ids
        ])

        if len(reviewer_ids) < MAX_REVIEWERS:
            logger.warning(
                "PR %s created with %d of %d reviewers: team %s has too few active members",
                pr_id, len(reviewer_ids), MAX_REVIEWERS, author.team.name,
            )
        else:
            logger.info("PR %s created, reviewers: %s", pr_id, ', '.join(reviewer_ids))
        return pr

    def _draw_reviewers(self, pool: list, limit: int) -> list:
        """Выборка без возвращения: выбранный кандидат убирается из пула перед следующим выбором"""
        remaining = list(pool)
        picked = []
        while remaining and len(picked) < limit:
            reviewer_id = self.selector.pick(remaining)
            remaining.remove(reviewer_id)
            picked.append(reviewer_id)
        return picked

    @transient_store_errors
    @transaction.atomic
    def merge_pull_request(self, pr_id: str) -> PullRequest:
        # merged_at выставляется только один раз, повторный merge ничего не меняет
        PullRequest.objects.filter(id=pr_id, merged_at__isnull=True).update(
            status=PullRequest.Status.MERGED,
            merged_at=timezone.now(),
        )
        try:
            pr = PullRequest.objects.get(id=pr_id)
        except PullRequest.DoesNotExist:
            raise PullRequestNotFound(f"PR '{pr_id}' not found")

        logger.info("PR %s merged at %s", pr_id, pr.merged_at.isoformat())
        return pr

    @transient_store_errors
    @transaction.atomic
    def reassign_reviewer(self, pr_id: str, old_user_id: str) -> tuple:
        # Блокировка строки PR сериализует параллельные переназначения одного PR
        try:
            pr = PullRequest.objects.select_for_update().get(id=pr_id)
        except PullRequest.DoesNotExist:
            raise PullRequestNotFound(f"PR '{pr_id}' not found")

        if pr.is_merged:
            raise PullRequestAlreadyMerged()

        current_reviewer_ids = pr.assigned_reviewer_ids()
        if old_user_id not in current_reviewer_ids:
            raise ReviewerNotAssigned()

        pool = list(
            User.objects.active_teammates(pr.team_id, exclude_ids=[pr.author_id, *current_reviewer_ids])
            .values_list('id', flat=True)
        )
        if not pool:
            raise NoEligibleCandidate()

        new_reviewer_id = self.selector.pick(pool)

        updated = ReviewerAssignment.objects.filter(
            pull_request_id=pr.id,
            reviewer_id=old_user_id,
        ).update(reviewer_id=new_reviewer_id, assigned_at=timezone.now())
        if not updated:
            raise ReviewerNotAssigned()

        logger.info("PR %s: reviewer %s replaced by %s", pr_id, old_user_id, new_reviewer_id)
        return pr, new_reviewer_id

    @retry_read_once
    def get_pull_request(self, pr_id: str) -> PullRequest:
        try:
            return PullRequest.objects.get(id=pr_id)
        except PullRequest.DoesNotExist:
            raise PullRequestNotFound(f"PR '{pr_id}' not found")

    @retry_read_once
    def list_pull_requests_by_reviewer(self, reviewer_id: str) -> list:
        return list(PullRequest.objects.assigned_to(reviewer_id))
