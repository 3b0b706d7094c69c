from typing import Union

from sqlalchemy.orm import Session

from core.exceptions import NotFound
from models import Video, Comment, ReactionTarget


class TargetResolver:
    """Looks up the live entity a reaction target refers to."""

    def __init__(self, db: Session):
        self.db = db

    def resolve(self, target: ReactionTarget) -> Union[Video, Comment]:
        """
        Return the video or comment behind ``target``.

        Raises:
            NotFound: If the entity does not exist
        """
        entity = self.db.get(target.model, target.id)
        if entity is None:
            raise NotFound(f"{target.type.label} not found", target=str(target))
        return entity
