"""Human-readable dump of a resolved image configuration."""

import logging
from typing import List, Optional

from apko_build.logging_config import logger

from .models import ImageConfiguration


def _fmt_list(items: List[str]) -> str:
    return "[" + ", ".join(items) + "]"


def summarize_image_configuration(config: ImageConfiguration, log: Optional[logging.Logger] = None) -> List[str]:
    """
    Log the configuration block by block and return the emitted lines.

    Contents are always shown; entrypoint, cmd and accounts only when set.
    """
    lines = [
        "image configuration:",
        "  contents:",
        f"    repositories: {_fmt_list(config.contents.repositories)}",
        f"    keyring:      {_fmt_list(config.contents.keyring)}",
        f"    packages:     {_fmt_list(config.contents.packages)}",
    ]

    entrypoint = config.entrypoint
    if not entrypoint.is_empty():
        lines.extend(
            [
                "  entrypoint:",
                f"    type:    {entrypoint.type}",
                f"    command: {entrypoint.command}",
                f"    services: {_fmt_list(entrypoint.services)}",
                f"    shell fragment: {entrypoint.shell_fragment}",
            ]
        )

    if config.cmd:
        lines.append(f"  cmd: {config.cmd}")

    accounts = config.accounts
    if not accounts.is_empty():
        lines.append("  accounts:")
        lines.append(f"    runas:  {accounts.run_as}")
        lines.append("    users:")
        for user in accounts.users:
            lines.append(f"      - uid={user.uid}({user.username}) gid={user.gid}")
        lines.append("    groups:")
        for group in accounts.groups:
            lines.append(f"      - gid={group.gid}({group.groupname}) members={_fmt_list(group.members)}")

    log = log or logger
    for line in lines:
        log.info(line)

    return lines
