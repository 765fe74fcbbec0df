"""
API Services Layer.

Each function opens its own session and owns its transaction. Routes call
these and serialise the returned rows.
"""

from api.services.admins import authorize_admin

from api.services.users import (
    ensure_user,
    get_profile,
    update_profile,
)

from api.services.jobs import (
    create_job,
    update_job,
    delete_job,
    list_jobs,
    get_job,
    get_filter_options,
)

from api.services.applications import (
    submit_application,
    update_status,
    check_has_applied,
    list_applications_for_user,
    list_applications_for_admin,
    get_application,
    delete_application,
)

from api.services.dashboard import get_dashboard_stats

__all__ = [
    # Admin gate
    "authorize_admin",
    # Users
    "ensure_user",
    "get_profile",
    "update_profile",
    # Jobs
    "create_job",
    "update_job",
    "delete_job",
    "list_jobs",
    "get_job",
    "get_filter_options",
    # Applications
    "submit_application",
    "update_status",
    "check_has_applied",
    "list_applications_for_user",
    "list_applications_for_admin",
    "get_application",
    "delete_application",
    # Dashboard
    "get_dashboard_stats",
]
