"""42 API tools.

Each tool maps validated arguments onto one upstream GET. Paths and query
parameter order follow the 42 API conventions (``filter[field]``,
``page[size]``, ``sort``) and must stay as they are.
"""

import json
from typing import Any, Dict

from models import (
    AccreditationInput,
    AccreditationsInput,
    AttachmentInput,
    AttachmentsInput,
    BalancesInput,
    CampusUsersInput,
    ClustersInput,
    CoalitionInput,
    CursusLevelInput,
    LocationsInput,
    MyProjectsInput,
    ProjectInput,
    ProjectsInput,
    SearchUsersInput,
    UserProjectsInput,
)
from services.api_client import ApiClient
from services.catalog import Catalog
from utils.query import encode_value

MAX_PAGE_SIZE = 100
SEARCH_LIMIT = 5


def as_text(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def register_tools(catalog: Catalog, api: ApiClient):
    """Register every 42 API tool on ``catalog``, in discovery order."""

    @catalog.tool(
        "searchUsers", SearchUsersInput,
        title="Search Users",
        description="Find 42 users by a case-insensitive login substring (max 5 results)",
    )
    async def search_users(args: SearchUsersInput) -> str:
        users = await api.request("/v2/users", {"filter[login]": args.query, "page[size]": SEARCH_LIMIT})
        return as_text(users)

    @catalog.tool(
        "getCursusLevel", CursusLevelInput,
        title="Get Cursus Level",
        description="Returns the level of a user in a specific cursus",
    )
    async def get_cursus_level(args: CursusLevelInput) -> str:
        cursus_users = await api.request(
            f"/v2/users/{args.user_id}/cursus_users", {"filter[cursus_id]": args.cursus_id},
        )
        if not cursus_users:
            return "User not enrolled in this cursus."
        return f"Level {cursus_users[0].get('level')} in cursus {args.cursus_id}"

    @catalog.tool(
        "getUserProjects", UserProjectsInput,
        title="Get User Projects",
        description="Retrieve all projects for a specific user",
    )
    async def get_user_projects(args: UserProjectsInput) -> str:
        query = {"filter[cursus_id]": args.cursus_id} if args.cursus_id else None
        return as_text(await api.request(f"/v2/users/{args.user_id}/projects_users", query))

    @catalog.tool(
        "getCoalition", CoalitionInput,
        title="Get Coalition Info",
        description="Get coalition information for a user",
    )
    async def get_coalition(args: CoalitionInput) -> str:
        return as_text(await api.request(f"/v2/users/{args.user_id}/coalitions"))

    @catalog.tool(
        "getCampusUsers", CampusUsersInput,
        title="Get Campus Users",
        description="Retrieve campus-user associations by campusId or userId",
    )
    async def get_campus_users(args: CampusUsersInput) -> str:
        if args.user_id:
            data = await api.request(f"/v2/users/{args.user_id}/campus_users")
        elif args.campus_id:
            data = await api.request("/v2/campus_users", {"filter[campus_id]": args.campus_id})
        else:
            data = await api.request("/v2/campus_users")
        return as_text(data)

    @catalog.tool(
        "getBalances", BalancesInput,
        title="Get Balances",
        description="Retrieve balances globally or for a specific pool (requires Advanced tutor role)",
    )
    async def get_balances(args: BalancesInput) -> str:
        path = f"/v2/pools/{args.pool_id}/balances" if args.pool_id else "/v2/balances"
        return as_text(await api.request(path))

    @catalog.tool(
        "getClusters", ClustersInput,
        title="Get Clusters",
        description="Retrieve clusters with optional campusId and/or name filter (requires Basic staff role)",
    )
    async def get_clusters(args: ClustersInput) -> str:
        query: Dict[str, Any] = {"page[size]": args.page_size}
        if args.campus_id:
            query["filter[campus_id]"] = args.campus_id
        if args.name:
            query["filter[name]"] = args.name
        return as_text(await api.request("/v2/clusters", query))

    @catalog.tool(
        "getLocations", LocationsInput,
        title="Get Locations",
        description="Retrieve user locations (seats) with optional campus, host, and activity filters",
    )
    async def get_locations(args: LocationsInput) -> str:
        path = f"/v2/campus/{args.campus_id}/locations" if args.campus_id else "/v2/locations"
        query: Dict[str, Any] = {"page[size]": args.page_size}
        if args.active:
            query["filter[active]"] = True
        if args.host:
            query["filter[host]"] = args.host
        return as_text(await api.request(path, query))

    @catalog.tool(
        "getAttachments", AttachmentsInput,
        title="Get Attachments",
        description="Retrieve attachments (PDFs, videos, links) with optional project filters",
    )
    async def get_attachments(args: AttachmentsInput) -> str:
        if args.project_session_id:
            path = f"/v2/project_sessions/{args.project_session_id}/attachments"
        elif args.project_id:
            path = f"/v2/projects/{args.project_id}/attachments"
        else:
            path = "/v2/attachments"
        query: Dict[str, Any] = {"page[size]": min(args.page_size, MAX_PAGE_SIZE)}
        if args.sort:
            query["sort"] = args.sort
        return as_text(await api.request(path, query))

    @catalog.tool(
        "getAttachment", AttachmentInput,
        title="Get Attachment Details",
        description="Get detailed information about a specific attachment including PDF URLs",
    )
    async def get_attachment(args: AttachmentInput) -> str:
        if args.project_session_id:
            path = f"/v2/project_sessions/{args.project_session_id}/attachments/{args.attachment_id}"
        else:
            path = f"/v2/attachments/{args.attachment_id}"
        return as_text(await api.request(path))

    @catalog.tool(
        "getProjects", ProjectsInput,
        title="Get Projects",
        description="Retrieve projects with optional cursus or project filters",
    )
    async def get_projects(args: ProjectsInput) -> str:
        if args.cursus_id:
            path = f"/v2/cursus/{args.cursus_id}/projects"
        elif args.project_id:
            path = f"/v2/projects/{args.project_id}/projects"
        else:
            path = "/v2/projects"
        query: Dict[str, Any] = {"page[size]": min(args.page_size, MAX_PAGE_SIZE)}
        if args.sort:
            query["sort"] = args.sort
        if args.filter:
            # The filter name itself goes inside the brackets
            query[f"filter[{encode_value(args.filter)}]"] = True
        return as_text(await api.request(path, query))

    @catalog.tool(
        "getProject", ProjectInput,
        title="Get Project Details",
        description="Get detailed information about a specific project",
    )
    async def get_project(args: ProjectInput) -> str:
        return as_text(await api.request(f"/v2/projects/{args.project_id}"))

    @catalog.tool(
        "getMyProjects", MyProjectsInput,
        title="Get My Projects",
        description="Get all projects for the current authenticated user",
    )
    async def get_my_projects(args: MyProjectsInput) -> str:
        query: Dict[str, Any] = {"page[size]": min(args.page_size, MAX_PAGE_SIZE)}
        if args.cursus_id:
            query["cursus_id"] = args.cursus_id
        if args.sort:
            query["sort"] = args.sort
        return as_text(await api.request("/v2/me/projects", query))

    @catalog.tool(
        "getAccreditations", AccreditationsInput,
        title="Get Accreditations",
        description="Retrieve accreditations with optional filtering and sorting",
    )
    async def get_accreditations(args: AccreditationsInput) -> str:
        query: Dict[str, Any] = {"page[size]": min(args.page_size, MAX_PAGE_SIZE)}
        if args.sort:
            query["sort"] = args.sort
        if args.user_id:
            query["filter[user_id]"] = args.user_id
        if args.cursus_id:
            query["filter[cursus_id]"] = args.cursus_id
        if args.validated is not None:
            query["filter[validated]"] = args.validated
        return as_text(await api.request("/v2/accreditations", query))

    @catalog.tool(
        "getAccreditation", AccreditationInput,
        title="Get Accreditation Details",
        description="Get detailed information about a specific accreditation",
    )
    async def get_accreditation(args: AccreditationInput) -> str:
        return as_text(await api.request(f"/v2/accreditations/{args.accreditation_id}"))
