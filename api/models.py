from django.db import models
from django.utils import timezone


class Team(models.Model):
    name = models.TextField(unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'teams'


class UserQuerySet(models.QuerySet):
    def active_teammates(self, team_id, exclude_ids=()):
        """
        Активные участники команды, кроме указанных пользователей.
        Порядок стабильный (по id), чтобы выбор с фиксированным seed был воспроизводим.
        """
        return (
            self.filter(team_id=team_id, is_active=True)
            .exclude(id__in=list(exclude_ids))
            .order_by('id')
        )


class User(models.Model):
    id = models.TextField(primary_key=True)
    username = models.TextField()
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='members')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserQuerySet.as_manager()

    def __str__(self):
        return f"{self.username} ({self.id})"

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['team', 'is_active'], name='idx_users_team_active'),
        ]


class PullRequestQuerySet(models.QuerySet):
    def assigned_to(self, reviewer_id):
        return self.filter(assignments__reviewer_id=reviewer_id).order_by('-created_at')


class PullRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        MERGED = 'MERGED', 'Merged'

    id = models.TextField(primary_key=True)
    name = models.TextField()
    author = models.ForeignKey(User, on_delete=models.PROTECT, related_name='authored_prs')
    # Команда фиксируется по автору при создании и больше не меняется
    team = models.ForeignKey(Team, on_delete=models.PROTECT, related_name='pull_requests')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    reviewers = models.ManyToManyField(
        User,
        through='ReviewerAssignment',
        related_name='assigned_prs',
        blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    merged_at = models.DateTimeField(null=True, blank=True)

    objects = PullRequestQuerySet.as_manager()

    @property
    def is_merged(self):
        return self.status == self.Status.MERGED

    def assigned_reviewer_ids(self) -> list:
        """Ревьюверы в порядке назначения (сначала самые ранние)"""
        return list(self.assignments.values_list('reviewer_id', flat=True))

    def __str__(self):
        return f"{self.name} ({self.id})"

    class Meta:
        db_table = 'pull_requests'
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(status='OPEN', merged_at__isnull=True)
                    | models.Q(status='MERGED', merged_at__isnull=False)
                ),
                name='pull_request_merged_at_matches_status',
            ),
        ]


class ReviewerAssignment(models.Model):
    pull_request = models.ForeignKey(PullRequest, on_delete=models.CASCADE, related_name='assignments')
    reviewer = models.ForeignKey(User, on_delete=models.PROTECT, related_name='review_assignments')
    assigned_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return f"{self.pull_request_id} -> {self.reviewer_id}"

    class Meta:
        db_table = 'pull_request_reviewers'
        ordering = ['assigned_at', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['pull_request', 'reviewer'],
                name='uniq_pull_request_reviewer',
            ),
        ]
        indexes = [
            models.Index(fields=['reviewer'], name='idx_pr_reviewers_reviewer'),
        ]
