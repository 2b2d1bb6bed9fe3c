from fastapi import APIRouter, Depends
from app.core.dependencies import (
    check_project_permission, get_current_user, get_supabase, require_project_permission
)
from app.modules.tasks.schemas import TaskCreate, TaskUpdate, TaskCompletionUpdate, TaskResponse
from app.modules.tasks.service import TaskService
from supabase import Client
from typing import Dict, List

router = APIRouter(tags=["tasks"])


def get_task_service(supabase: Client = Depends(get_supabase)) -> TaskService:
    return TaskService(supabase)


@router.get("/projects/{project_id}/tasks", response_model=List[TaskResponse])
async def list_tasks(
    project_id: str,
    user_data: Dict = Depends(require_project_permission("VIEW_TASKS")),
    service: TaskService = Depends(get_task_service)
):
    return service.list_tasks(project_id)


@router.post("/projects/{project_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    project_id: str,
    task_data: TaskCreate,
    user_data: Dict = Depends(require_project_permission("CREATE_TASK")),
    service: TaskService = Depends(get_task_service)
):
    """Add a task (owners, admins and editors)"""
    return service.create_task(project_id, task_data)


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    task = service.get_task(task_id)
    check_project_permission(task.project_id, "VIEW_TASKS", user_data, supabase)
    return task


@router.put("/tasks/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    task = service.get_task(task_id)
    check_project_permission(task.project_id, "EDIT_TASK", user_data, supabase)
    return service.update_task(task_id, task_data)


@router.patch("/tasks/{task_id}/completion", response_model=TaskResponse)
async def set_task_completion(
    task_id: str,
    completion: TaskCompletionUpdate,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    """Set the completed flag; sending the current value again is harmless"""
    task = service.get_task(task_id)
    check_project_permission(task.project_id, "EDIT_TASK", user_data, supabase)
    return service.set_completed(task_id, completion.completed)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user_data: Dict = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
    supabase: Client = Depends(get_supabase)
):
    task = service.get_task(task_id)
    check_project_permission(task.project_id, "DELETE_TASK", user_data, supabase)
    service.delete_task(task_id)
    return None
