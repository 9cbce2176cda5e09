"""Employee permission catalogue - features, actions, labels and role templates"""

from enum import Enum
from typing import Iterable, Union

from ...schemas import EmployeePermission


class Feature(str, Enum):
    DASHBOARD = "dashboard"
    BOOKINGS = "bookings"
    QUOTES = "quotes"
    INVOICES = "invoices"
    CUSTOMERS = "customers"
    EMPLOYEES = "employees"
    REVIEWS = "reviews"
    NEWSLETTER = "newsletter"
    TEAM = "team"
    MESSAGES = "messages"
    ACTIVITY_LOGS = "activity_logs"
    SERVICES = "services"
    GALLERY = "gallery"
    FAQ = "faq"
    SETTINGS = "settings"


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    ASSIGN = "assign"
    SEND = "send"
    APPROVE = "approve"


def _crud(*extra: tuple[Action, str]) -> list[tuple[Action, str]]:
    return [
        (Action.VIEW, "View"),
        (Action.CREATE, "Create"),
        (Action.EDIT, "Edit"),
        (Action.DELETE, "Delete"),
        *extra,
    ]


# feature -> (label, [(action, action label)])
PERMISSION_METADATA: dict[Feature, tuple[str, list[tuple[Action, str]]]] = {
    Feature.DASHBOARD: ("Dashboard", [(Action.VIEW, "View Statistics")]),
    Feature.BOOKINGS: ("Bookings", _crud((Action.ASSIGN, "Assign Employees"))),
    Feature.QUOTES: (
        "Quotes",
        [(Action.VIEW, "View"), (Action.EDIT, "Edit Status"), (Action.DELETE, "Delete")],
    ),
    Feature.INVOICES: ("Invoices", _crud((Action.SEND, "Send Payment Links"))),
    Feature.CUSTOMERS: ("Customers", _crud()),
    Feature.EMPLOYEES: ("Employees", _crud()),
    Feature.REVIEWS: (
        "Reviews",
        [(Action.VIEW, "View"), (Action.APPROVE, "Approve/Deny"), (Action.DELETE, "Delete")],
    ),
    Feature.NEWSLETTER: (
        "Newsletter",
        [(Action.VIEW, "View Subscribers"), (Action.SEND, "Send Emails")],
    ),
    Feature.TEAM: ("Team Members", _crud()),
    Feature.MESSAGES: (
        "Contact Messages",
        [(Action.VIEW, "View"), (Action.EDIT, "Update Status"), (Action.DELETE, "Delete")],
    ),
    Feature.ACTIVITY_LOGS: ("Activity Logs", [(Action.VIEW, "View")]),
    Feature.SERVICES: ("Services", [(Action.VIEW, "View"), (Action.EDIT, "Edit")]),
    Feature.GALLERY: ("Gallery", [(Action.VIEW, "View"), (Action.EDIT, "Edit")]),
    Feature.FAQ: ("FAQ", [(Action.VIEW, "View"), (Action.EDIT, "Edit")]),
    Feature.SETTINGS: ("Settings", [(Action.VIEW, "View"), (Action.EDIT, "Edit")]),
}


def _grants(spec: dict[Feature, Iterable[Action]]) -> list[EmployeePermission]:
    return [
        EmployeePermission(feature=f.value, actions=[a.value for a in actions])
        for f, actions in spec.items()
    ]


DEFAULT_TEMPLATES = {
    "full_admin": {
        "name": "Full Administrator",
        "description": "Complete access to all features",
        "permissions": _grants(
            {feature: [a for a, _ in actions] for feature, (_, actions) in PERMISSION_METADATA.items()}
        ),
    },
    "manager": {
        "name": "Manager",
        "description": "Can manage bookings, quotes, customers, and team",
        "permissions": _grants(
            {
                Feature.DASHBOARD: [Action.VIEW],
                Feature.BOOKINGS: [Action.VIEW, Action.CREATE, Action.EDIT, Action.ASSIGN],
                Feature.QUOTES: [Action.VIEW, Action.EDIT],
                Feature.INVOICES: [Action.VIEW, Action.CREATE, Action.EDIT, Action.SEND],
                Feature.CUSTOMERS: [Action.VIEW, Action.CREATE, Action.EDIT],
                Feature.EMPLOYEES: [Action.VIEW],
                Feature.REVIEWS: [Action.VIEW, Action.APPROVE],
                Feature.TEAM: [Action.VIEW],
                Feature.MESSAGES: [Action.VIEW, Action.EDIT],
                Feature.ACTIVITY_LOGS: [Action.VIEW],
            }
        ),
    },
    "operator": {
        "name": "Operator",
        "description": "Can view and update bookings and quotes",
        "permissions": _grants(
            {
                Feature.DASHBOARD: [Action.VIEW],
                Feature.BOOKINGS: [Action.VIEW, Action.EDIT],
                Feature.QUOTES: [Action.VIEW],
                Feature.CUSTOMERS: [Action.VIEW],
                Feature.MESSAGES: [Action.VIEW],
            }
        ),
    },
    "viewer": {
        "name": "View Only",
        "description": "Can only view data, no modifications",
        "permissions": _grants(
            {
                feature: [Action.VIEW]
                for feature in (
                    Feature.DASHBOARD,
                    Feature.BOOKINGS,
                    Feature.QUOTES,
                    Feature.INVOICES,
                    Feature.CUSTOMERS,
                    Feature.EMPLOYEES,
                    Feature.REVIEWS,
                    Feature.TEAM,
                )
            }
        ),
    },
}


def has_permission(
    permissions: list[EmployeePermission],
    feature: Union[Feature, str],
    action: Union[Action, str],
) -> bool:
    """True when the grant list includes action on feature"""
    feature = Feature(feature).value
    action = Action(action).value
    for permission in permissions:
        if permission.feature == feature:
            return action in permission.actions
    return False


def metadata_table() -> list[dict]:
    """PERMISSION_METADATA as JSON for the permission editor"""
    return [
        {
            "feature": feature.value,
            "label": label,
            "availableActions": [{"action": a.value, "label": a_label} for a, a_label in actions],
        }
        for feature, (label, actions) in PERMISSION_METADATA.items()
    ]
