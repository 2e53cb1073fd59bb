"""Sample data inserted when the database is initialized on demand."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from flowquest.models.agent_profile import AgentProfile

logger = logging.getLogger(__name__)

SAMPLE_AGENT = {
    "name": "Barista Bella",
    "persona": {
        "tone": "friendly and patient",
        "background": "Runs a small neighbourhood coffee shop and loves chatting with regulars.",
        "voice": "warm, short sentences, asks follow-up questions",
    },
    "memories": [],
}


def seed_sample_agent(db: Session) -> bool:
    """Insert the sample agent when the agents collection is empty.

    Returns True when a row was written.
    """
    if db.scalars(select(AgentProfile.id).limit(1)).first() is not None:
        return False
    db.add(AgentProfile(**SAMPLE_AGENT))
    db.commit()
    logger.info("Seeded sample agent profile %r", SAMPLE_AGENT["name"])
    return True
