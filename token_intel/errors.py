class TokenIntelError(Exception):
    """Base error for token_intel."""


class NotFoundError(TokenIntelError):
    """The primary entity of an operation does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")
