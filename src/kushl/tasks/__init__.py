"""
Project → Sprint → Campaign → Task hierarchy.
"""
from kushl.tasks.activity import ActivityService
from kushl.tasks.repository import ProjectRepository, TaskLocation
from kushl.tasks.service import TaskService

__all__ = ["ActivityService", "ProjectRepository", "TaskLocation", "TaskService"]
