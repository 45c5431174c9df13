"""Study engine errors."""


class StudyError(Exception):
    pass


class ScopeNotFoundError(StudyError):
    """The requested section or book does not exist (or is not the caller's)."""

    def __init__(self, kind: str, scope_id: int) -> None:
        self.kind = kind
        self.scope_id = scope_id
        super().__init__(f"{kind} {scope_id} not found")


class SessionNotFoundError(StudyError):
    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"study session {session_id} not found")
