from datetime import timedelta
from smtplib import SMTPException
from unittest import mock

from django.core import mail
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from projects.models import Project, Task
from users.models import User


class ProjectApiTests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.manager = User.objects.create_user(
            username="manager@example.com", email="manager@example.com", password="pass",
            name="Mona", role="manager",
        )
        self.leader = User.objects.create_user(
            username="leader@example.com", email="leader@example.com", password="pass",
            name="Leo", role="team-leader",
        )
        self.coop = User.objects.create_user(
            username="coop@example.com", email="coop@example.com", password="pass",
            name="Cora", role="co-operator",
        )
        self.member = User.objects.create_user(
            username="member@example.com", email="member@example.com", password="pass",
            name="Max", role="member",
        )

    def auth(self, user):
        self.client.force_authenticate(user=user)

    # ---- list ----

    def test_list_requires_authentication(self):
        resp = self.client.get("/api/projects")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list_is_scoped_per_role(self):
        mine = Project.objects.create(title="Mine", manager=self.manager, team_leader=self.leader)
        other_manager = User.objects.create_user(
            username="other@example.com", email="other@example.com", password="pass", role="manager"
        )
        staffed = Project.objects.create(title="Staffed", manager=other_manager)
        staffed.members.add(self.coop)

        self.auth(self.manager)
        self.assertEqual([p["title"] for p in self.client.get("/api/projects").json()], ["Mine"])

        self.auth(self.leader)
        self.assertEqual([p["title"] for p in self.client.get("/api/projects").json()], ["Mine"])

        self.auth(self.coop)
        self.assertEqual([p["title"] for p in self.client.get("/api/projects").json()], ["Staffed"])

        self.auth(self.member)
        self.assertEqual(self.client.get("/api/projects").json(), [])
        self.assertTrue(Project.objects.filter(pk=mine.pk).exists())

    def test_list_populates_people(self):
        project = Project.objects.create(title="Mine", manager=self.manager, team_leader=self.leader)
        project.members.add(self.coop)
        self.auth(self.manager)
        data = self.client.get("/api/projects").json()[0]
        self.assertEqual(data["manager"], {"id": self.manager.id, "name": "Mona", "email": "manager@example.com"})
        self.assertEqual(data["teamLeader"]["name"], "Leo")
        self.assertEqual([m["email"] for m in data["members"]], ["coop@example.com"])
        self.assertNotIn("password", data["manager"])

    # ---- create ----

    def test_manager_creates_project_and_leader_is_told(self):
        self.auth(self.manager)
        deadline = timezone.now() + timedelta(days=7)
        resp = self.client.post(
            "/api/projects",
            {
                "title": "Launch",
                "description": "Ship it",
                "teamLeaderId": self.leader.id,
                "members": [self.coop.id],
                "deadline": deadline.isoformat(),
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.json()
        self.assertEqual(data["title"], "Launch")
        self.assertEqual(data["status"], "active")
        self.assertEqual(data["manager"]["id"], self.manager.id)
        self.assertEqual(data["teamLeader"]["id"], self.leader.id)
        self.assertEqual([m["id"] for m in data["members"]], [self.coop.id])

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "New Project Assignment")
        self.assertEqual(mail.outbox[0].to, ["leader@example.com"])
        self.assertIn("Launch", mail.outbox[0].body)

    def test_co_operator_may_be_team_leader(self):
        self.auth(self.manager)
        resp = self.client.post("/api/projects", {"title": "X", "teamLeaderId": self.coop.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

    def test_create_without_team_leader_sends_nothing(self):
        self.auth(self.manager)
        resp = self.client.post("/api/projects", {"title": "Solo"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(resp.json()["teamLeader"])
        self.assertEqual(len(mail.outbox), 0)

    def test_non_manager_cannot_create(self):
        for user in (self.leader, self.coop, self.member):
            self.auth(user)
            resp = self.client.post("/api/projects", {"title": "Nope"}, format="json")
            self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Project.objects.count(), 0)

    def test_create_requires_title(self):
        self.auth(self.manager)
        for body in ({}, {"title": ""}, {"title": "   "}):
            resp = self.client.post("/api/projects", body, format="json")
            self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(resp.json()["errors"]["detail"], "Please add a title")
        self.assertEqual(Project.objects.count(), 0)

    def test_invalid_team_leader_creates_nothing(self):
        self.auth(self.manager)
        resp = self.client.post("/api/projects", {"title": "X", "teamLeaderId": self.member.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["detail"], "User must be a Team Leader or Co-operator")

        resp = self.client.post("/api/projects", {"title": "X", "teamLeaderId": 9999}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.json()["errors"]["detail"], "Invalid Team Leader")

        self.assertEqual(Project.objects.count(), 0)
        self.assertEqual(len(mail.outbox), 0)

    def test_unknown_member_is_rejected(self):
        self.auth(self.manager)
        resp = self.client.post("/api/projects", {"title": "X", "members": [9999]}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Project.objects.count(), 0)

    def test_create_succeeds_when_assignment_mail_fails(self):
        self.auth(self.manager)
        with mock.patch("notifications.dispatch.send_mail", side_effect=SMTPException("down")):
            resp = self.client.post("/api/projects", {"title": "X", "teamLeaderId": self.leader.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Project.objects.count(), 1)

    # ---- update ----

    def test_update_unknown_project_is_404(self):
        self.auth(self.manager)
        resp = self.client.put("/api/projects/9999", {"title": "X"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_manager_puts_project_on_hold(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        project.members.add(self.coop, self.member)
        self.auth(self.manager)

        resp = self.client.put(f"/api/projects/{project.id}", {"status": "on-hold"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["status"], "on-hold")

        self.assertEqual(len(mail.outbox), 3)
        self.assertEqual(
            sorted(m.to[0] for m in mail.outbox),
            ["coop@example.com", "leader@example.com", "member@example.com"],
        )
        self.assertTrue(all(m.subject == "Project On Hold: Launch" for m in mail.outbox))

    def test_team_leader_on_hold_is_silent(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        project.members.add(self.coop)
        self.auth(self.leader)
        resp = self.client.put(f"/api/projects/{project.id}", {"status": "on-hold"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 0)

    def test_on_hold_failure_does_not_stop_other_recipients(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        project.members.add(self.coop, self.member)
        self.auth(self.manager)

        from django.core.mail import send_mail as real_send_mail

        def flaky(*args, **kwargs):
            if kwargs["recipient_list"] == ["leader@example.com"]:
                raise SMTPException("mailbox full")
            return real_send_mail(*args, **kwargs)

        with mock.patch("notifications.dispatch.send_mail", side_effect=flaky):
            resp = self.client.put(f"/api/projects/{project.id}", {"status": "on-hold"}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(m.to[0] for m in mail.outbox), ["coop@example.com", "member@example.com"])
        project.refresh_from_db()
        self.assertEqual(project.status, Project.STATUS_ON_HOLD)

    def test_completed_by_team_leader_notifies_manager(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        self.auth(self.leader)
        resp = self.client.put(f"/api/projects/{project.id}", {"status": "completed"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["manager@example.com"])
        self.assertEqual(mail.outbox[0].subject, "Project Completed: Launch")

    def test_same_status_sends_nothing(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        self.auth(self.manager)
        resp = self.client.put(f"/api/projects/{project.id}", {"status": "active", "title": "Relaunch"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["title"], "Relaunch")
        self.assertEqual(len(mail.outbox), 0)

    def test_assigned_co_operator_cannot_update(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.coop)
        self.auth(self.coop)
        resp = self.client.put(f"/api/projects/{project.id}", {"title": "Hijack"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        project.refresh_from_db()
        self.assertEqual(project.title, "Launch")

    def test_update_validates_team_leader(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        self.auth(self.manager)
        resp = self.client.put(f"/api/projects/{project.id}", {"teamLeaderId": self.member.id}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        project.refresh_from_db()
        self.assertEqual(project.team_leader, self.leader)

    def test_update_members(self):
        project = Project.objects.create(title="Launch", manager=self.manager)
        self.auth(self.manager)
        resp = self.client.put(f"/api/projects/{project.id}", {"members": [self.coop.id, self.member.id]}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(set(project.members.values_list("id", flat=True)), {self.coop.id, self.member.id})

    # ---- delete ----

    def test_delete_notifies_team_and_removes_project(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        project.members.add(self.coop, self.member)
        self.auth(self.manager)

        resp = self.client.delete(f"/api/projects/{project.id}")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json(), {"id": project.id})
        self.assertFalse(Project.objects.filter(pk=project.id).exists())
        self.assertEqual(len(mail.outbox), 3)
        self.assertTrue(all(m.subject == "Project Deleted: Launch" for m in mail.outbox))

    def test_delete_goes_ahead_when_every_notification_fails(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        project.members.add(self.coop, self.member)
        self.auth(self.manager)

        with mock.patch("notifications.dispatch.send_mail", side_effect=SMTPException("down")) as send:
            resp = self.client.delete(f"/api/projects/{project.id}")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(send.call_count, 3)
        self.assertFalse(Project.objects.filter(pk=project.id).exists())

    def test_delete_keeps_tasks_unlinked(self):
        project = Project.objects.create(title="Launch", manager=self.manager)
        task = Task.objects.create(user=self.coop, project=project, title="Design")
        self.auth(self.manager)
        self.client.delete(f"/api/projects/{project.id}")
        task.refresh_from_db()
        self.assertIsNone(task.project_id)

    def test_only_managers_delete(self):
        project = Project.objects.create(title="Launch", manager=self.manager, team_leader=self.leader)
        self.auth(self.leader)
        resp = self.client.delete(f"/api/projects/{project.id}")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Project.objects.filter(pk=project.id).exists())
        self.assertEqual(len(mail.outbox), 0)

    def test_delete_unknown_project_is_404(self):
        self.auth(self.manager)
        self.assertEqual(self.client.delete("/api/projects/9999").status_code, status.HTTP_404_NOT_FOUND)
