"""
Pydantic models for writing, validating and reloading the configuration.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BackupRecord(BaseModel):
    """Copy of the previous nginx.conf taken before it is overwritten."""

    source_path: str
    backup_path: str
    size: int = 0
    created_at: datetime = Field(default_factory=datetime.now)


class NginxConfigTestResult(BaseModel):
    """Result of NGINX configuration test (nginx -t)."""

    success: bool = Field(..., description="Whether configuration is valid")
    message: str = Field(..., description="Result message from nginx -t")
    stdout: Optional[str] = Field(None, description="Standard output from test")
    stderr: Optional[str] = Field(None, description="Standard error from test (contains result)")
    tested_at: datetime = Field(
        default_factory=datetime.now,
        description="When the test was performed"
    )


class DeploymentResult(BaseModel):
    """Outcome of a deployment."""

    success: bool
    config_path: str
    message: str
    backup: Optional[BackupRecord] = None
    validation: Optional[NginxConfigTestResult] = None
    reloaded: bool = False
    restored: bool = False
