from django.db import IntegrityError
from django.test import TestCase

from api.exceptions import TeamAlreadyExists, TeamNotFound
from api.models import Team, User
from api.services import TeamService


class TeamServiceTest(TestCase):
    def setUp(self):
        self.team_name = "backend"
        self.members_data = [
            {"user_id": "u1", "username": "Charlie", "is_active": True},
            {"user_id": "u2", "username": "Alice", "is_active": True},
            {"user_id": "u3", "username": "Bob", "is_active": False},
        ]

    def test_create_team_with_members_success(self):
        """Тест успешного создания команды с пользователями"""
        team = TeamService.create_team_with_members(self.team_name, self.members_data)

        self.assertEqual(team.name, self.team_name)
        self.assertEqual(team.members.count(), 3)

        user1 = User.objects.get(id="u1")
        self.assertEqual(user1.username, "Charlie")
        self.assertTrue(user1.is_active)
        self.assertEqual(user1.team, team)
        self.assertFalse(User.objects.get(id="u3").is_active)

    def test_create_team_duplicate(self):
        """Тест создания дубликата команды"""
        TeamService.create_team_with_members(self.team_name, self.members_data)

        with self.assertRaises(TeamAlreadyExists) as context:
            TeamService.create_team_with_members(self.team_name, [
                {"user_id": "u4", "username": "Dave", "is_active": True},
            ])

        self.assertEqual(context.exception.code, 'TEAM_EXISTS')
        # Участники из неудачного запроса не создаются
        self.assertFalse(User.objects.filter(id="u4").exists())

    def test_create_team_empty_members(self):
        """Тест создания команды без пользователей"""
        team = TeamService.create_team_with_members("empty_team", [])

        self.assertEqual(team.name, "empty_team")
        self.assertEqual(team.members.count(), 0)

    def test_create_team_skips_members_without_id(self):
        team = TeamService.create_team_with_members("qa", [
            {"user_id": "", "username": "Nobody", "is_active": True},
            {"user_id": "q1", "username": "Quinn", "is_active": True},
        ])

        self.assertEqual([member.id for member in team.members.all()], ["q1"])

    def test_create_team_moves_existing_user(self):
        """Существующий пользователь переходит в новую команду с обновленными данными"""
        old_team = Team.objects.create(name="old_team")
        User.objects.create(id="existing", username="Old Name", is_active=False, team=old_team)

        team = TeamService.create_team_with_members("new_team", [
            {"user_id": "existing", "username": "New Name", "is_active": True},
        ])

        user = User.objects.get(id="existing")
        self.assertEqual(user.username, "New Name")
        self.assertTrue(user.is_active)
        self.assertEqual(user.team, team)
        self.assertEqual(old_team.members.count(), 0)

    def test_get_team_with_members_sorted_by_username(self):
        """Участники команды отсортированы по имени"""
        TeamService.create_team_with_members(self.team_name, self.members_data)

        team = TeamService.get_team_with_members(self.team_name)

        self.assertEqual(team.name, self.team_name)
        self.assertEqual([member.username for member in team.members.all()], ["Alice", "Bob", "Charlie"])

    def test_get_team_with_members_not_found(self):
        """Тест получения несуществующей команды"""
        with self.assertRaises(TeamNotFound):
            TeamService.get_team_with_members("nonexistent")

    def test_create_team_logs_only_upserted_members(self):
        with self.assertLogs('pullrequester.services', level='INFO') as logs:
            TeamService.create_team_with_members("qa", [
                {"user_id": "", "username": "Nobody", "is_active": True},
                {"user_id": "q1", "username": "Quinn", "is_active": True},
            ])

        self.assertIn("Team qa created with 1 members", logs.output[-1])

    def test_create_team_null_username_is_not_transient(self):
        """NOT NULL нарушение пробрасывается как есть, а не как временный сбой"""
        with self.assertRaises(IntegrityError):
            TeamService.create_team_with_members("nulls", [
                {"user_id": "u1", "username": None, "is_active": True},
            ])

        self.assertFalse(Team.objects.filter(name="nulls").exists())
