"""Data models for image configuration documents.

Each model knows how to build itself from the decoded YAML mapping. Keys use
the document spelling (``shell-fragment``, ``run-as``, ``os-release``...);
unknown keys are ignored so newer documents still load. Documents read
from disk hand over scalars as their source text; integer fields accept
decimal text or ints.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apko_build.exceptions import ParseError

SERVICE_BUNDLE_TYPE = "service-bundle"

_DECIMAL_RE = re.compile(r"[-+]?[0-9]+")


def _path(parent: str, key: str) -> str:
    return f"{parent}.{key}" if parent else key


def _mapping(value: Any, where: str) -> Dict[str, Any]:
    """Return ``value`` as a mapping; ``None`` counts as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{where or 'document'}: expected a mapping, got {type(value).__name__}")
    return value


def _string(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ParseError(f"{_path(where, key)}: expected a string, got {type(value).__name__}")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _string_list(data: Dict[str, Any], key: str, where: str) -> List[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"{_path(where, key)}: expected a list, got {type(value).__name__}")
    items = []
    for idx, item in enumerate(value):
        if item is None or isinstance(item, (dict, list)):
            raise ParseError(f"{_path(where, key)}[{idx}]: expected a string")
        items.append(str(item))
    return items


def _integer(data: Dict[str, Any], key: str, where: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, str) and _DECIMAL_RE.fullmatch(value):
        return int(value)
    # bool is an int subclass; "uid: true" is a type mismatch
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParseError(f"{_path(where, key)}: expected an integer, got {value!r}")
    return value


def _records(data: Dict[str, Any], key: str, where: str) -> List[Dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"{_path(where, key)}: expected a list, got {type(value).__name__}")
    return [_mapping(item, f"{_path(where, key)}[{idx}]") for idx, item in enumerate(value)]


@dataclass
class ImageContents:
    """Repositories, keys and packages that make up the image filesystem."""

    repositories: List[str] = field(default_factory=list)
    keyring: List[str] = field(default_factory=list)
    packages: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, where: str = "contents") -> "ImageContents":
        data = _mapping(data, where)
        return cls(
            repositories=_string_list(data, "repositories", where),
            keyring=_string_list(data, "keyring", where),
            packages=_string_list(data, "packages", where),
        )


@dataclass
class ImageEntrypoint:
    """How the image starts. ``type`` is only interpreted for service bundles."""

    type: str = ""
    command: str = ""
    services: List[str] = field(default_factory=list)
    shell_fragment: str = ""

    @classmethod
    def from_dict(cls, data: Any, where: str = "entrypoint") -> "ImageEntrypoint":
        data = _mapping(data, where)
        return cls(
            type=_string(data, "type", where),
            command=_string(data, "command", where),
            services=_string_list(data, "services", where),
            shell_fragment=_string(data, "shell-fragment", where),
        )

    @property
    def is_service_bundle(self) -> bool:
        return self.type == SERVICE_BUNDLE_TYPE

    def is_empty(self) -> bool:
        return not (self.type or self.command or self.services or self.shell_fragment)


@dataclass
class User:
    username: str = ""
    uid: int = 0
    gid: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str) -> "User":
        return cls(
            username=_string(data, "username", where),
            uid=_integer(data, "uid", where),
            gid=_integer(data, "gid", where),
        )

    def __str__(self) -> str:
        return f"{{username={self.username!r} uid={self.uid} gid={self.gid}}}"


@dataclass
class Group:
    groupname: str = ""
    gid: int = 0
    members: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str) -> "Group":
        return cls(
            groupname=_string(data, "groupname", where),
            gid=_integer(data, "gid", where),
            members=_string_list(data, "members", where),
        )

    def __str__(self) -> str:
        return f"{{groupname={self.groupname!r} gid={self.gid} members={self.members}}}"


@dataclass
class ImageAccounts:
    run_as: str = ""
    users: List[User] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any, where: str = "accounts") -> "ImageAccounts":
        data = _mapping(data, where)
        users_where = _path(where, "users")
        groups_where = _path(where, "groups")
        return cls(
            run_as=_string(data, "run-as", where),
            users=[
                User.from_dict(item, f"{users_where}[{idx}]")
                for idx, item in enumerate(_records(data, "users", where))
            ],
            groups=[
                Group.from_dict(item, f"{groups_where}[{idx}]")
                for idx, item in enumerate(_records(data, "groups", where))
            ],
        )

    def is_empty(self) -> bool:
        return not (self.run_as or self.users or self.groups)


@dataclass
class OSRelease:
    """Fields used to synthesize the image's ``/etc/os-release``."""

    id: str = ""
    name: str = ""
    pretty_name: str = ""
    version_id: str = ""
    home_url: str = ""

    @classmethod
    def from_dict(cls, data: Any, where: str = "os-release") -> "OSRelease":
        data = _mapping(data, where)
        return cls(
            id=_string(data, "id", where),
            name=_string(data, "name", where),
            pretty_name=_string(data, "pretty-name", where),
            version_id=_string(data, "version-id", where),
            home_url=_string(data, "home-url", where),
        )

    def to_os_release(self) -> str:
        """Render as an os-release(5) file. Empty fields are omitted."""
        lines = []
        if self.id:
            lines.append(f"ID={self.id}")
        if self.name:
            lines.append(f'NAME="{self.name}"')
        if self.pretty_name:
            lines.append(f'PRETTY_NAME="{self.pretty_name}"')
        if self.version_id:
            lines.append(f"VERSION_ID={self.version_id}")
        if self.home_url:
            lines.append(f'HOME_URL="{self.home_url}"')
        return "".join(f"{line}\n" for line in lines)


@dataclass
class ImageConfiguration:
    """
    Root of an image configuration document.

    Attributes:
        contents: Repositories, keyring and packages to install
        entrypoint: Entrypoint settings, including service-bundle mode
        cmd: Default command, independent of the entrypoint
        accounts: Run-as identity plus declared users and groups
        os_release: Fields for the synthesized os-release record
        vcs_url: Source repository URL, empty until set or probed
    """

    contents: ImageContents = field(default_factory=ImageContents)
    entrypoint: ImageEntrypoint = field(default_factory=ImageEntrypoint)
    cmd: str = ""
    accounts: ImageAccounts = field(default_factory=ImageAccounts)
    os_release: OSRelease = field(default_factory=OSRelease)
    vcs_url: str = ""

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ImageConfiguration":
        """
        Build a configuration from a decoded document.

        Raises:
            ParseError: If the document shape does not match the schema
        """
        data = _mapping(data, "")
        return cls(
            contents=ImageContents.from_dict(data.get("contents")),
            entrypoint=ImageEntrypoint.from_dict(data.get("entrypoint")),
            cmd=_string(data, "cmd", ""),
            accounts=ImageAccounts.from_dict(data.get("accounts")),
            os_release=OSRelease.from_dict(data.get("os-release")),
            vcs_url=_string(data, "vcs-url", ""),
        )
