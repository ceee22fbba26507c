"""
Crossplane-based NGINX configuration parser.

Reads back a main nginx.conf and summarises its structure: top-level
settings, server blocks and their locations. Used to report what was
deployed, never to accept or reject a file.
"""

import logging
from datetime import datetime
from pathlib import Path

import crossplane

from models.nginx import (
    ListenDirective,
    LocationBlock,
    ParsedNginxConfig,
    ServerBlock,
)

logger = logging.getLogger(__name__)


class CrossplaneParser:
    """NGINX parser using the crossplane library."""

    def parse_config_file(self, file_path: Path) -> ParsedNginxConfig | None:
        """
        Parse a main NGINX configuration file.

        Included files are not followed.

        Args:
            file_path: Path to nginx.conf

        Returns:
            ParsedNginxConfig summary, or None if the file is missing or unreadable
        """
        try:
            if not file_path.exists():
                logger.warning(f"Config file not found: {file_path}")
                return None

            stat = file_path.stat()

            # check_args=False: third-party directives such as auth_pam are
            # unknown to crossplane's argument tables
            payload = crossplane.parse(
                str(file_path),
                catch_errors=True,
                single=True,
                check_ctx=False,
                check_args=False,
            )

            errors = payload.get("errors", [])
            status = "ok" if payload.get("status") != "failed" else "failed"

            if errors:
                logger.warning(f"Parse warnings in {file_path}: {errors}")

            user = None
            worker_connections = None
            server_blocks = []
            includes = []

            for config in payload.get("config", []):
                parsed = config.get("parsed", [])
                self._extract_includes_recursive(parsed, includes)

                for directive in parsed:
                    name = directive.get("directive", "")
                    args = directive.get("args", [])
                    block = directive.get("block", [])

                    if name == "user" and args:
                        user = args[0]

                    elif name == "events":
                        worker_connections = self._parse_worker_connections(block)

                    elif name == "http":
                        for child in block:
                            if child.get("directive") == "server":
                                server_blocks.append(
                                    self._parse_server_block(child.get("block", []), child.get("line", 0))
                                )

            return ParsedNginxConfig(
                file_path=str(file_path),
                file_size=stat.st_size,
                updated_at=datetime.fromtimestamp(stat.st_mtime),
                status=status,
                errors=errors,
                user=user,
                worker_connections=worker_connections,
                server_blocks=server_blocks,
                includes=includes,
            )

        except Exception as e:
            logger.error(f"Error parsing config file {file_path}: {e}")
            return None

    def _extract_includes_recursive(self, directives: list[dict], includes: list[str]) -> None:
        """
        Recursively extract all include patterns from a directive tree.

        Args:
            directives: List of directive dictionaries
            includes: List to append found include patterns to
        """
        for directive in directives:
            directive_name = directive.get("directive", "")
            args = directive.get("args", [])

            if directive_name == "include" and args:
                include_pattern = args[0]
                if include_pattern not in includes:
                    includes.append(include_pattern)

            block = directive.get("block", [])
            if block:
                self._extract_includes_recursive(block, includes)

    def _parse_worker_connections(self, block: list[dict]) -> int | None:
        for directive in block:
            args = directive.get("args", [])
            if directive.get("directive") == "worker_connections" and args:
                try:
                    return int(args[0])
                except ValueError:
                    return None
        return None

    def _parse_server_block(self, block: list[dict], line: int) -> ServerBlock:
        """Extract structured ServerBlock from raw directives."""
        server_names = []
        listen_directives = []
        locations = []
        root = None
        index = None

        for directive in block:
            name = directive.get("directive", "")
            args = directive.get("args", [])
            directive_line = directive.get("line", 0)

            if name == "server_name":
                server_names.extend(args)

            elif name == "listen":
                listen_directives.append(self._parse_listen_directive(args))

            elif name == "location":
                loc_block = directive.get("block", [])
                locations.append(self._parse_location_block(args, loc_block, directive_line))

            elif name == "root":
                root = args[0] if args else None

            elif name == "index":
                index = args

        return ServerBlock(
            server_names=server_names,
            listen=listen_directives,
            root=root,
            index=index,
            locations=locations,
            line=line,
        )

    def _parse_location_block(self, args: list[str], block: list[dict], line: int) -> LocationBlock:
        """Extract LocationBlock from location directive."""
        modifier = None
        path = "/"

        if len(args) == 1:
            path = args[0]
        elif len(args) >= 2:
            if args[0] in ("=", "~", "~*", "^~"):
                modifier = args[0]
                path = args[1]
            else:
                path = args[0]

        alias = None
        try_files = None
        auth_basic = None
        auth_pam = None
        fastcgi_pass = None
        other_directives = {}

        for directive in block:
            name = directive.get("directive", "")
            directive_args = directive.get("args", [])
            value = directive_args[0] if directive_args else None

            if name == "alias":
                alias = value
            elif name == "try_files":
                try_files = " ".join(directive_args) if directive_args else None
            elif name == "auth_basic":
                auth_basic = value
            elif name == "auth_pam":
                auth_pam = value
            elif name == "fastcgi_pass":
                fastcgi_pass = value
            else:
                # Directives such as fastcgi_param repeat, so keep every occurrence
                other_directives.setdefault(name, []).append(directive_args)

        return LocationBlock(
            modifier=modifier,
            path=path,
            alias=alias,
            try_files=try_files,
            auth_basic=auth_basic,
            auth_pam=auth_pam,
            fastcgi_pass=fastcgi_pass,
            directives=other_directives,
            line=line,
        )

    def _parse_listen_directive(self, args: list[str]) -> ListenDirective:
        """Parse listen directive arguments into structured form."""
        port = 80
        address = None

        if not args:
            return ListenDirective(port=port, address=address, raw_args=args)

        first_arg = args[0]

        if first_arg.startswith("unix:"):
            address = first_arg
            port = 0
        elif ":" in first_arg:
            address, _, port_text = first_arg.rpartition(":")
            try:
                port = int(port_text)
            except ValueError:
                pass
        else:
            try:
                port = int(first_arg)
            except ValueError:
                pass

        return ListenDirective(port=port, address=address, raw_args=args)


# Global parser instance
nginx_parser = CrossplaneParser()
