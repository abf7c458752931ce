# core/constants.py

# --- Roles (closed set, no hierarchy) ---
ROLE_MANAGER = "manager"
ROLE_TEAM_LEADER = "team-leader"
ROLE_CO_OPERATOR = "co-operator"
ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"  # unattributed default

ROLE_CHOICES = [
    (ROLE_MANAGER, "Manager"),
    (ROLE_TEAM_LEADER, "Team Leader"),
    (ROLE_CO_OPERATOR, "Co-operator"),
    (ROLE_ADMIN, "Admin"),
    (ROLE_MEMBER, "Member"),
]

# --- Capabilities, enumerated per operation ---

# Project listing: leader OR member scope
PROJECT_PARTICIPANT_ROLES = (ROLE_TEAM_LEADER, ROLE_CO_OPERATOR)

# Who may be put in charge of a project
PROJECT_LEADER_ROLES = (ROLE_TEAM_LEADER, ROLE_CO_OPERATOR)

# Project update. Co-operators are deliberately absent.
PROJECT_EDITOR_ROLES = (ROLE_MANAGER, ROLE_TEAM_LEADER)

# Project create / delete
PROJECT_OWNER_ROLES = (ROLE_MANAGER,)

# Task assignment to someone else, by role
TASK_ASSIGNER_ROLES = (ROLE_TEAM_LEADER,)

# User directory administration
USER_ADMIN_ROLES = (ROLE_MANAGER, ROLE_ADMIN)
