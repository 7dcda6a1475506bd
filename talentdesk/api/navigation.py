"""Sidebar navigation, filtered through the content guard."""

from typing import List, NamedTuple, Optional

from talentdesk.api.guards import guard_content
from talentdesk.core.rbac.permissions import Resource
from talentdesk.core.rbac.session import RBACSession


class NavItem(NamedTuple):
    title: str
    path: str
    resource: Optional[Resource] = None  # None: always visible


NAV_ITEMS: List[NavItem] = [
    NavItem("Dashboard", "/"),
    NavItem("Clients", "/clients", Resource.CLIENTS),
    NavItem("Job Descriptions", "/jobs", Resource.JOBS),
    NavItem("Candidates", "/candidates", Resource.CANDIDATES),
    NavItem("Employees", "/employees", Resource.EMPLOYEES),
    NavItem("Screen Tracker", "/screen-tracker", Resource.SCREENING),
    NavItem("Onboard Tracker", "/onboard-tracker", Resource.ONBOARDING),
    NavItem("Interviews", "/interviews", Resource.INTERVIEWS),
    NavItem("Reports", "/reports", Resource.REPORTS),
    NavItem("Users", "/users", Resource.USERS),
    NavItem("Roles", "/roles", Resource.ROLES),
]


def navigation_items(session: RBACSession) -> List[dict]:
    """Navigation entries the current role may read."""
    visible = []
    for item in NAV_ITEMS:
        entry = {"title": item.title, "path": item.path}
        if item.resource is None:
            visible.append(entry)
            continue
        shown = guard_content(session, item.resource, entry)
        if shown is not None:
            visible.append(shown)
    return visible
