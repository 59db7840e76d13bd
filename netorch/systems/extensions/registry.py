"""
Netorch — Extension Registry

Extensions are kept in declaration order. Lookup by (type, address family)
returns the first declared match, so earlier declarations shadow later ones
that cover the same ground.

The registry is assembled once while configuration loads and is read-only
afterwards.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from netorch.primitives.common import AddressFamilyMask
from netorch.systems.extensions.types import Extension, ExtensionType

logger = structlog.get_logger()


class ExtensionRegistry:
    def __init__(self) -> None:
        self._extensions: list[Extension] = []
        self._logger = logger.bind(system="extensions.registry")

    def append(self, extension: Extension) -> None:
        """
        Append an extension after all previously declared ones.

        Raises ValueError if an extension of the same name and type already
        covers one of its address families.
        """
        for existing in self._extensions:
            if (
                existing.name == extension.name
                and existing.type == extension.type
                and existing.supported_af & extension.supported_af
            ):
                raise ValueError(
                    f"Extension {extension.name!r} ({extension.type.value}) already registered "
                    f"for address families {existing.supported_af!r}"
                )
        self._extensions.append(extension)
        self._logger.debug(
            "extension_registered",
            extension=extension.name,
            type=extension.type.value,
            supported_af=int(extension.supported_af),
        )

    def find(self, type: ExtensionType, family: int) -> Extension | None:
        """
        First declared extension of *type* supporting *family*.

        AF_UNSPEC matches any family. Families other than IPv4/IPv6 never match.
        """
        mask = AddressFamilyMask.for_family(family)
        if mask is None:
            return None
        for extension in self._extensions:
            if extension.type == type and extension.supported_af & mask:
                return extension
        return None

    def clear(self) -> None:
        """Tear down the whole registry."""
        self._extensions.clear()

    def __iter__(self) -> Iterator[Extension]:
        return iter(list(self._extensions))

    def __len__(self) -> int:
        return len(self._extensions)

    def __repr__(self) -> str:
        return f"<ExtensionRegistry extensions={[e.name for e in self._extensions]}>"
