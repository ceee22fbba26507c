"""
NGINX configuration generator.

Generates the main nginx.conf and its optional location blocks
using Jinja2 templates.
"""

from .generator import ConfigGenerator, ConfigGeneratorError, get_config_generator

__all__ = ["ConfigGenerator", "ConfigGeneratorError", "get_config_generator"]
