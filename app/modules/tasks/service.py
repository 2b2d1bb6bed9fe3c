from supabase import Client
from app.core.errors import not_found, permission_denied, translate_error
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskResponse
from typing import List


class TaskService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_tasks(self, project_id: str) -> List[TaskResponse]:
        """Tasks of a project, oldest first"""
        try:
            result = self.supabase.table("tasks")\
                .select("*")\
                .eq("project_id", project_id)\
                .order("created_at")\
                .execute()
        except Exception as e:
            raise translate_error(e, "load tasks", "You don't have permission to view tasks in this project")
        return [TaskResponse(**task) for task in result.data or []]

    def get_task(self, task_id: str) -> TaskResponse:
        try:
            result = self.supabase.table("tasks")\
                .select("*")\
                .eq("id", task_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_error(e, "fetch task", "You don't have permission to view this task")
        if not result.data:
            raise not_found("Task not found")
        return TaskResponse(**result.data[0])

    def create_task(self, project_id: str, task_data: TaskCreate) -> TaskResponse:
        try:
            result = self.supabase.table("tasks").insert({
                "project_id": project_id,
                "title": task_data.title.strip(),
                "description": task_data.description,
                "completed": False
            }).execute()
        except Exception as e:
            raise translate_error(e, "create task", "You don't have permission to add tasks to this project")
        if not result.data:
            raise permission_denied("You don't have permission to add tasks to this project")
        return TaskResponse(**result.data[0])

    def update_task(self, task_id: str, task_data: TaskUpdate) -> TaskResponse:
        update_data = task_data.model_dump(exclude_unset=True)
        if update_data.get("title") is not None:
            update_data["title"] = update_data["title"].strip()
        # title and completed are NOT NULL columns
        for column in ("title", "completed"):
            if column in update_data and update_data[column] is None:
                del update_data[column]
        if not update_data:
            return self.get_task(task_id)
        return self._write(task_id, update_data, "update task", "You don't have permission to edit this task")

    def set_completed(self, task_id: str, completed: bool) -> TaskResponse:
        """Set the completed flag explicitly; writing the current value again is a no-op that still succeeds"""
        return self._write(
            task_id, {"completed": completed}, "update task", "You don't have permission to update this task"
        )

    def delete_task(self, task_id: str) -> bool:
        try:
            result = self.supabase.table("tasks")\
                .delete()\
                .eq("id", task_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, "delete task", "You don't have permission to delete this task")
        if not result.data:
            raise permission_denied("You don't have permission to delete this task")
        return True

    def _write(self, task_id: str, update_data: dict, action: str, denied_detail: str) -> TaskResponse:
        try:
            result = self.supabase.table("tasks")\
                .update(update_data)\
                .eq("id", task_id)\
                .execute()
        except Exception as e:
            raise translate_error(e, action, denied_detail)
        if not result.data:
            raise permission_denied(denied_detail)
        return TaskResponse(**result.data[0])
