# NGINX configuration read-back

from .crossplane_parser import CrossplaneParser, nginx_parser

__all__ = ["CrossplaneParser", "nginx_parser"]
