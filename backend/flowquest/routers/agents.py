"""Agent profiles router."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from flowquest.clock import utcnow
from flowquest.database import get_db, use_collection
from flowquest.identifiers import generate_identifier
from flowquest.models.agent_profile import AgentProfile
from flowquest.schemas.agent import AgentProfileCreate, AgentProfileResponse, AgentProfileUpdate
from flowquest.schemas.common import ApiResponse, iso, ok
from flowquest.services.filters import apply_filters
from flowquest.services.lookup import get_or_404
from flowquest.services.validation import EntityKind, ensure_valid

router = APIRouter(
    prefix="/api/agents",
    tags=["agents"],
    dependencies=[Depends(use_collection(AgentProfile))],
)


def _agent_to_response(agent: AgentProfile) -> AgentProfileResponse:
    return AgentProfileResponse(
        id=agent.id,
        name=agent.name,
        persona=dict(agent.persona or {}),
        memories=list(agent.memories or []),
        created_at=iso(agent.created_at),
        updated_at=iso(agent.updated_at),
    )


def _dump_body(req: AgentProfileCreate) -> dict:
    return req.model_dump(by_alias=True, mode="json", exclude_unset=True, exclude_none=True)


def _stamp_memories(memories: list[dict], agent_id: str) -> list[dict]:
    """Give every embedded memory an id, its owning agent and a creation time."""
    now = utcnow().isoformat()
    stamped = []
    for memory in memories:
        stamped.append({
            **memory,
            "_id": memory.get("_id") or generate_identifier(),
            "agent_id": agent_id,
            "created_at": memory.get("created_at") or now,
        })
    return stamped


@router.get("", response_model=ApiResponse[list[AgentProfileResponse]], response_model_exclude_unset=True)
def list_agents(name: Optional[str] = Query(None), db: Session = Depends(get_db)):
    agents = apply_filters(db.query(AgentProfile), AgentProfile, {"name": name}).all()
    return ok([_agent_to_response(a) for a in agents])


@router.post("", response_model=ApiResponse[AgentProfileResponse], response_model_exclude_unset=True, status_code=201)
def create_agent(req: AgentProfileCreate, db: Session = Depends(get_db)):
    data = _dump_body(req)
    ensure_valid(EntityKind.AGENT_PROFILE, data)

    agent_id = generate_identifier()
    agent = AgentProfile(
        id=agent_id,
        name=data["name"],
        persona=data.get("persona", {}),
        memories=_stamp_memories(data.get("memories", []), agent_id),
    )
    db.add(agent)
    db.commit()
    db.refresh(agent)
    return ok(_agent_to_response(agent))


@router.get("/{agent_id}", response_model=ApiResponse[AgentProfileResponse], response_model_exclude_unset=True)
def get_agent(agent_id: str, db: Session = Depends(get_db)):
    agent = get_or_404(db, AgentProfile, agent_id, "Agent profile")
    return ok(_agent_to_response(agent))


@router.put("/{agent_id}", response_model=ApiResponse[AgentProfileResponse], response_model_exclude_unset=True)
def update_agent(agent_id: str, req: AgentProfileUpdate, db: Session = Depends(get_db)):
    """Merge the supplied fields over the stored profile; the result is fully re-validated."""
    agent = get_or_404(db, AgentProfile, agent_id, "Agent profile")
    changes = _dump_body(req)
    merged = {
        "name": agent.name,
        "persona": dict(agent.persona or {}),
        "memories": list(agent.memories or []),
        **changes,
    }
    ensure_valid(EntityKind.AGENT_PROFILE, merged)

    agent.name = merged["name"]
    agent.persona = merged["persona"]
    agent.memories = _stamp_memories(merged["memories"], agent.id)
    agent.updated_at = utcnow()
    db.commit()
    db.refresh(agent)
    return ok(_agent_to_response(agent))
