"""
Interior Tracker - Project Registry
"""
import logging
from typing import List, Optional, Union

from pydantic import ValidationError

from interior_tracker.backends.base import RecordStore
from interior_tracker.errors import NotFound, ValidationFailed, validation_message
from interior_tracker.schemas.project import Project, ProjectCreate

logger = logging.getLogger(__name__)

TABLE = "projects"


class ProjectRegistry:
    """
    Projects of one owner, newest first.

    `projects` is the list as last fetched; a successful create prepends
    to it instead of fetching again.
    """

    def __init__(self, records: RecordStore, owner_id: Optional[str] = None):
        self.records = records
        self.owner_id = owner_id
        self.projects: List[Project] = []

    async def list_projects(self) -> List[Project]:
        filters = {"user_id": self.owner_id} if self.owner_id else None
        rows = await self.records.select(TABLE, filters, order_by="created_at", descending=True)
        self.projects = [Project.model_validate(row) for row in rows]
        return self.projects

    async def get_project(self, project_id: str) -> Project:
        rows = await self.records.select(TABLE, {"id": project_id})
        if not rows:
            raise NotFound(f"Project with id {project_id} not found")
        return Project.model_validate(rows[0])

    async def create_project(
        self,
        name: str,
        description: Optional[str] = None,
        floors: Union[int, str] = 1,
    ) -> Project:
        """
        Validate locally, insert, then prepend to the in-memory list.

        floors may arrive as form text; anything that is not a whole number
        of at least 1 is a ValidationFailed.
        """
        try:
            payload = ProjectCreate(name=name, description=description or None, floors=floors)
        except ValidationError as e:
            raise ValidationFailed(validation_message(e)) from e

        record = payload.model_dump()
        if self.owner_id:
            record["user_id"] = self.owner_id

        row = await self.records.insert(TABLE, record)
        project = Project.model_validate(row)
        self.projects = [project, *self.projects]

        logger.info(f"Project created: '{project.name}' ({project.floors} floors)")
        return project
