from smtplib import SMTPException
from unittest import mock

from django.core import mail
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from projects.models import Project, Task
from users.models import User


class UserDirectoryApiTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(
            username="manager@example.com", email="manager@example.com", password="pass",
            name="Mona", role="manager",
        )
        self.admin = User.objects.create_user(
            username="admin@example.com", email="admin@example.com", password="pass",
            name="Ada", role="admin",
        )
        self.leader = User.objects.create_user(
            username="leader@example.com", email="leader@example.com", password="pass",
            name="Leo", role="team-leader",
        )

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def test_list_hides_passwords(self):
        self.auth(self.leader)
        resp = self.client.get("/api/users")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.json()), 3)
        for entry in resp.json():
            self.assertNotIn("password", entry)

    def test_list_filters_by_role(self):
        self.auth(self.manager)
        resp = self.client.get("/api/users", {"role": "team-leader"})
        self.assertEqual([u["email"] for u in resp.json()], ["leader@example.com"])

    def test_list_requires_authentication(self):
        self.assertEqual(self.client.get("/api/users").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.auth(self.leader)
        resp = self.client.get("/api/users/me")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["email"], "leader@example.com")
        self.assertEqual(resp.json()["role"], "team-leader")

    def test_manager_adds_team_leader_by_default(self):
        self.auth(self.manager)
        resp = self.client.post(
            "/api/users",
            {"name": "Tia", "email": "tia@example.com", "password": "s3cret-pass"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.json()
        self.assertEqual(data["role"], "team-leader")
        self.assertNotIn("password", data)

        user = User.objects.get(email="tia@example.com")
        self.assertTrue(user.check_password("s3cret-pass"))
        self.assertEqual(user.username, "tia@example.com")

    def test_admin_adds_with_explicit_role(self):
        self.auth(self.admin)
        resp = self.client.post(
            "/api/users",
            {"name": "Cory", "email": "cory@example.com", "password": "pw", "role": "co-operator"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.json()["role"], "co-operator")

    def test_missing_fields(self):
        self.auth(self.manager)
        resp = self.client.post("/api/users", {"email": "x@example.com"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["detail"], "Please add all fields")

    def test_duplicate_email(self):
        self.auth(self.manager)
        resp = self.client.post(
            "/api/users",
            {"name": "Leo 2", "email": "Leader@example.com", "password": "pw"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["detail"], "User already exists")

    def test_team_leader_cannot_add_or_remove(self):
        self.auth(self.leader)
        resp = self.client.post(
            "/api/users", {"name": "N", "email": "n@example.com", "password": "pw"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        resp = self.client.delete(f"/api/users/{self.admin.id}")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(User.objects.filter(pk=self.admin.id).exists())

    def test_remove_user_notifies_then_deletes(self):
        self.auth(self.manager)
        resp = self.client.delete(f"/api/users/{self.leader.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json(), {"message": "User removed"})
        self.assertFalse(User.objects.filter(pk=self.leader.id).exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "You have been removed")
        self.assertEqual(mail.outbox[0].to, ["leader@example.com"])

    def test_remove_user_when_mail_fails(self):
        self.auth(self.manager)
        with mock.patch("notifications.dispatch.send_mail", side_effect=SMTPException("down")):
            resp = self.client.delete(f"/api/users/{self.leader.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertFalse(User.objects.filter(pk=self.leader.id).exists())

    def test_remove_unknown_user(self):
        self.auth(self.manager)
        self.assertEqual(self.client.delete("/api/users/9999").status_code, status.HTTP_404_NOT_FOUND)

    def test_removing_owner_keeps_projects_and_tasks(self):
        coop = User.objects.create_user(
            username="coop@example.com", email="coop@example.com", password="pass",
            name="Cora", role="co-operator",
        )
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        task = Task.objects.create(user=coop, project=project, title="Design")
        self.auth(self.admin)

        resp = self.client.delete(f"/api/users/{self.manager.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        resp = self.client.delete(f"/api/users/{coop.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.assertEqual(Project.objects.count(), 1)
        self.assertEqual(Task.objects.count(), 1)
        project.refresh_from_db()
        task.refresh_from_db()
        self.assertIsNone(project.manager_id)
        self.assertEqual(project.team_leader, self.leader)
        self.assertIsNone(task.user_id)
        self.assertEqual(task.project, project)
        # Only the two removal notices, no project-deleted mails
        self.assertEqual([m.subject for m in mail.outbox], ["You have been removed", "You have been removed"])
