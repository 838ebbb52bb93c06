from .team_views import team_add, team_get
from .user_views import user_set_active, users_get_review
from .pull_request_views import pullrequest_create, pullrequest_merge, pullrequest_reassign, pullrequest_get
from .health_views import health_check

__all__ = [
    'team_add', 'team_get',
    'user_set_active', 'users_get_review',
    'pullrequest_create', 'pullrequest_merge', 'pullrequest_reassign', 'pullrequest_get',
    'health_check'
]
