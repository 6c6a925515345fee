"""
Agent REST Endpoints.
CRUD for stored personas, scoped to the authenticated user.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from app.api.deps import get_current_user
from app.core.exceptions import AgentNotFoundException
from app.db.models import User
from app.db.repositories import AgentRepository

logger = logging.getLogger(__name__)

router = APIRouter()


class AgentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    companyName: str = Field(..., min_length=1, max_length=100)
    personality: str = Field(..., min_length=1)
    companyInfo: str = Field(..., min_length=1)
    prompts: List[str] = Field(default_factory=list)


class AgentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    companyName: Optional[str] = Field(default=None, min_length=1, max_length=100)
    personality: Optional[str] = Field(default=None, min_length=1)
    companyInfo: Optional[str] = Field(default=None, min_length=1)
    prompts: Optional[List[str]] = None


def _columns(body: BaseModel) -> dict:
    data = body.model_dump(exclude_unset=True)
    mapping = {"companyName": "company_name", "companyInfo": "company_info"}
    return {mapping.get(key, key): value for key, value in data.items()}


@router.get("")
async def list_agents(user: User = Depends(get_current_user)):
    agents = await AgentRepository().get_by_user(user.id)
    return [agent.to_dict() for agent in agents]


@router.get("/{agent_id}")
async def get_agent(agent_id: str, user: User = Depends(get_current_user)):
    agent = await AgentRepository().get_for_user(agent_id, user.id)
    if agent is None:
        raise AgentNotFoundException(agent_id)
    return agent.to_dict()


@router.post("", status_code=201)
async def create_agent(body: AgentCreate, user: User = Depends(get_current_user)):
    agent = await AgentRepository().create({"user_id": user.id, **_columns(body)})
    logger.info(f"Created agent {agent.id} for user {user.id}")
    return agent.to_dict()


@router.put("/{agent_id}")
async def update_agent(agent_id: str, body: AgentUpdate, user: User = Depends(get_current_user)):
    agent = await AgentRepository().update(agent_id, user.id, _columns(body))
    if agent is None:
        raise AgentNotFoundException(agent_id)
    return agent.to_dict()


@router.delete("/{agent_id}")
async def delete_agent(agent_id: str, user: User = Depends(get_current_user)):
    if not await AgentRepository().delete(agent_id, user.id):
        raise AgentNotFoundException(agent_id)
    return {"message": "Agent deleted successfully"}
