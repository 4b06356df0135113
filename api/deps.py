"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from api.config import Settings, get_settings
from api.services.job_service import JobService, get_job_service

__all__ = ["SettingsDep", "JobServiceDep"]


# Settings dependency
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Background job service
JobServiceDep = Annotated[JobService, Depends(get_job_service)]
