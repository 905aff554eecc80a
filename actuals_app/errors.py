# actuals_app/errors.py
'''
实际成本核算的结构化异常
NotFoundError 继承 ValueError，兼容按 ValueError 捕获的调用方
'''


class ActualsError(Exception):
    """Base class for every error raised by the actuals engine."""


class NotFoundError(ActualsError, ValueError):
    pass


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}")
        self.project_id = project_id


class ActualsNotFoundError(NotFoundError):
    def __init__(self, project_id: str):
        super().__init__(f"ProjectActuals not found for project: {project_id}")
        self.project_id = project_id


class EntryNotFoundError(NotFoundError):
    def __init__(self, entry_type: str, entry_id: str):
        super().__init__(f"{entry_type} entry not found: {entry_id}")
        self.entry_type = entry_type
        self.entry_id = entry_id


class StoreUnavailableError(ActualsError):
    """A persistence call failed. Not retried by the engine."""


class ConcurrentUpdateConflictError(ActualsError):
    def __init__(self, project_id: str, attempts: int):
        super().__init__(
            f"ProjectActuals for project {project_id} kept changing concurrently; "
            f"gave up after {attempts} attempts"
        )
        self.project_id = project_id
        self.attempts = attempts
