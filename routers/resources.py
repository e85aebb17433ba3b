"""42 API resources.

Static URIs are listed by resources/list; templated ones (``{id}``) are only
reachable through resources/read with a concrete identifier.
"""

from typing import Dict

from routers.tools import as_text
from services.api_client import ApiClient
from services.catalog import Catalog

LIST_PAGE_SIZE = 100


def register_resources(catalog: Catalog, api: ApiClient):
    """Register the 42 API resources on ``catalog``."""

    @catalog.resource(
        "42://user/{id}", name="user",
        title="42 User Profile",
        description="JSON profile for a cadet or staff member fetched from 42 API",
    )
    async def user(variables: Dict[str, str]) -> str:
        return as_text(await api.request(f"/v2/users/{variables['id']}"))

    @catalog.resource(
        "42://me", name="me",
        title="My 42 Profile",
        description="Your own user object from 42 API",
    )
    async def me(variables: Dict[str, str]) -> str:
        return as_text(await api.request("/v2/me"))

    @catalog.resource(
        "42://campus", name="campus",
        title="42 Campus List",
        description="List of all 42 campuses worldwide",
    )
    async def campus(variables: Dict[str, str]) -> str:
        return as_text(await api.request("/v2/campus"))

    @catalog.resource(
        "42://attachments/{projectId}", name="attachments",
        title="Project Attachments",
        description="Attachments (PDFs, videos, links) for a specific project",
    )
    async def project_attachments(variables: Dict[str, str]) -> str:
        return as_text(await api.request(f"/v2/projects/{variables['projectId']}/attachments"))

    @catalog.resource(
        "42://attachments", name="all-attachments",
        title="All Attachments",
        description="List of all attachments (PDFs, videos, links) in the system",
    )
    async def all_attachments(variables: Dict[str, str]) -> str:
        return as_text(await api.request("/v2/attachments", {"page[size]": LIST_PAGE_SIZE}))

    @catalog.resource(
        "42://project/{id}", name="project",
        title="Project Details",
        description="Detailed information about a specific project",
    )
    async def project(variables: Dict[str, str]) -> str:
        return as_text(await api.request(f"/v2/projects/{variables['id']}"))

    @catalog.resource(
        "42://projects", name="all-projects",
        title="All Projects",
        description="List of all projects in the system",
    )
    async def all_projects(variables: Dict[str, str]) -> str:
        return as_text(await api.request("/v2/projects", {"page[size]": LIST_PAGE_SIZE}))

    @catalog.resource(
        "42://me/projects", name="my-projects",
        title="My Projects",
        description="List of projects for the current authenticated user",
    )
    async def my_projects(variables: Dict[str, str]) -> str:
        return as_text(await api.request("/v2/me/projects", {"page[size]": LIST_PAGE_SIZE}))

    @catalog.resource(
        "42://accreditation/{id}", name="accreditation",
        title="Accreditation Details",
        description="Detailed information about a specific accreditation",
    )
    async def accreditation(variables: Dict[str, str]) -> str:
        return as_text(await api.request(f"/v2/accreditations/{variables['id']}"))

    @catalog.resource(
        "42://accreditations", name="all-accreditations",
        title="All Accreditations",
        description="List of all accreditations in the system",
    )
    async def all_accreditations(variables: Dict[str, str]) -> str:
        return as_text(await api.request("/v2/accreditations", {"page[size]": LIST_PAGE_SIZE}))
