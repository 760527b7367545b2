"""
Site configuration records: author profile, profile links, friend links.

Each record enumerates its fields. Loading rejects unknown keys and missing
required keys with ConfigError instead of carrying arbitrary attributes.
"""

import json
from dataclasses import dataclass, field, fields, MISSING
from pathlib import Path
from typing import Any, Dict, List, Tuple, Type, TypeVar

T = TypeVar("T")


class ConfigError(ValueError):
    """Invalid site configuration."""


@dataclass(frozen=True)
class ProfileLink:
    name: str
    icon: str
    url: str
    show_name: bool = False


@dataclass(frozen=True)
class ProfileConfig:
    avatar: str
    name: str
    bio: str = ""
    links: Tuple[ProfileLink, ...] = ()


@dataclass(frozen=True)
class FriendsPageConfig:
    # Empty title/description means the theme's translated default is used.
    title: str = ""
    description: str = ""
    show_custom_content: bool = True


@dataclass(frozen=True)
class FriendLink:
    title: str
    imgurl: str
    desc: str
    siteurl: str
    tags: Tuple[str, ...] = ()
    weight: int = 0
    enabled: bool = True


@dataclass(frozen=True)
class SiteConfig:
    profile: ProfileConfig
    friends_page: FriendsPageConfig = field(default_factory=FriendsPageConfig)
    friends: Tuple[FriendLink, ...] = ()


def _build(cls: Type[T], data: Any, where: str) -> T:
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected an object, got {type(data).__name__}")
    known = {f.name: f for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise ConfigError(f"{where}: unknown field(s): {', '.join(unknown)}")
    missing = [
        name for name, f in known.items()
        if name not in data and f.default is MISSING and f.default_factory is MISSING
    ]
    if missing:
        raise ConfigError(f"{where}: missing field(s): {', '.join(missing)}")
    return cls(**data)


def _expect(value: Any, kind: type, where: str) -> None:
    # bool is an int subclass; reject it where a number is expected
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ConfigError(f"{where}: expected {kind.__name__}, got {type(value).__name__}")


def parse_profile(data: Dict[str, Any]) -> ProfileConfig:
    if not isinstance(data, dict):
        raise ConfigError("profile: expected an object")
    raw = dict(data)
    links = raw.pop("links", [])
    if not isinstance(links, list):
        raise ConfigError("profile.links: expected a list")
    parsed_links = []
    for i, link in enumerate(links):
        item = _build(ProfileLink, link, f"profile.links[{i}]")
        _expect(item.show_name, bool, f"profile.links[{i}].show_name")
        parsed_links.append(item)
    profile = _build(ProfileConfig, raw, "profile")
    return ProfileConfig(avatar=profile.avatar, name=profile.name, bio=profile.bio, links=tuple(parsed_links))


def parse_friend(data: Dict[str, Any], where: str = "friend") -> FriendLink:
    friend = _build(FriendLink, data, where)
    _expect(friend.weight, int, f"{where}.weight")
    _expect(friend.enabled, bool, f"{where}.enabled")
    if not isinstance(friend.tags, (list, tuple)):
        raise ConfigError(f"{where}.tags: expected a list")
    return FriendLink(
        title=friend.title,
        imgurl=friend.imgurl,
        desc=friend.desc,
        siteurl=friend.siteurl,
        tags=tuple(friend.tags),
        weight=friend.weight,
        enabled=friend.enabled,
    )


def parse_site_config(data: Dict[str, Any]) -> SiteConfig:
    if not isinstance(data, dict):
        raise ConfigError("site config: expected an object")
    unknown = sorted(set(data) - {"profile", "friends_page", "friends"})
    if unknown:
        raise ConfigError(f"site config: unknown field(s): {', '.join(unknown)}")
    if "profile" not in data:
        raise ConfigError("site config: missing field(s): profile")

    friends = data.get("friends", [])
    if not isinstance(friends, list):
        raise ConfigError("friends: expected a list")

    return SiteConfig(
        profile=parse_profile(data["profile"]),
        friends_page=_build(FriendsPageConfig, data.get("friends_page", {}), "friends_page"),
        friends=tuple(parse_friend(f, f"friends[{i}]") for i, f in enumerate(friends)),
    )


def load_site_config(path: Path) -> SiteConfig:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}")
    return parse_site_config(data)


def enabled_friends(friends: List[FriendLink]) -> List[FriendLink]:
    """Enabled friend links, highest weight first."""
    return sorted((f for f in friends if f.enabled), key=lambda f: f.weight, reverse=True)
