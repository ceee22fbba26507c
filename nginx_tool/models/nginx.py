"""
Pydantic models for NGINX configuration structures.

These models hold the summary of a configuration file as parsed by
crossplane, used to report what was actually written.
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


class ListenDirective(BaseModel):
    """Represents a listen directive."""

    port: int = Field(..., description="Port number to listen on")
    address: Optional[str] = Field(None, description="IP address or socket path")
    raw_args: List[str] = Field(default_factory=list, description="Original arguments")


class LocationBlock(BaseModel):
    """Represents an NGINX location block."""

    modifier: Optional[str] = Field(
        None,
        description="Location modifier: =, ~, ~*, ^~, or None for prefix match"
    )
    path: str = Field(..., description="Location path or pattern")
    alias: Optional[str] = Field(None, description="Alias path")
    try_files: Optional[str] = Field(None, description="try_files directive value")
    auth_basic: Optional[str] = Field(None, description="Basic auth realm")
    auth_pam: Optional[str] = Field(None, description="PAM auth realm")
    fastcgi_pass: Optional[str] = Field(None, description="FastCGI upstream")
    directives: Dict[str, Any] = Field(
        default_factory=dict,
        description="Other directives as key-value pairs"
    )
    line: int = Field(..., description="Source line number for error reporting")


class ServerBlock(BaseModel):
    """Represents an NGINX server block."""

    server_names: List[str] = Field(
        default_factory=list,
        description="All server_name values"
    )
    listen: List[ListenDirective] = Field(
        default_factory=list,
        description="All listen directives"
    )
    root: Optional[str] = Field(None, description="Default document root")
    index: Optional[List[str]] = Field(None, description="Default index files")
    locations: List[LocationBlock] = Field(
        default_factory=list,
        description="Location blocks"
    )
    line: int = Field(default=0, description="Source line number")


class ParsedNginxConfig(BaseModel):
    """Summary of a parsed main NGINX configuration file."""

    file_path: str = Field(..., description="Full path to the config file")
    file_size: int = Field(..., description="File size in bytes")
    updated_at: Optional[datetime] = Field(None, description="File modification time")
    status: str = Field(default="ok", description="Parse status: ok or failed")
    errors: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Parse errors with line numbers"
    )
    user: Optional[str] = Field(None, description="Value of the top-level user directive")
    worker_connections: Optional[int] = Field(None, description="events/worker_connections value")
    server_blocks: List[ServerBlock] = Field(
        default_factory=list,
        description="All server blocks inside the http block"
    )
    includes: List[str] = Field(
        default_factory=list,
        description="Referenced include patterns"
    )
