from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional


@dataclass(frozen=True)
class NavigationPolicy:
    wait_until: str = "networkidle"
    # None or 0 waits indefinitely
    timeout_seconds: Optional[float] = 30.0

    @property
    def timeout_ms(self) -> float:
        if not self.timeout_seconds:
            return 0
        return self.timeout_seconds * 1000


class BrowserSession(ABC):
    @abstractmethod
    async def read_meta(self, selector: str) -> Optional[str]:  # pragma: no cover - interface
        """Return the content attribute of the first match, or None when no element matches."""
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError


class BrowserCapability(ABC):
    @abstractmethod
    async def open(self, url: str, policy: NavigationPolicy) -> BrowserSession:  # pragma: no cover - interface
        """Launch an isolated session and navigate it to url.

        Implementations release anything they launched before raising.
        """
        raise NotImplementedError


@asynccontextmanager
async def open_session(
    browser: BrowserCapability, url: str, policy: NavigationPolicy
) -> AsyncIterator[BrowserSession]:
    session = await browser.open(url, policy)
    try:
        yield session
    finally:
        await session.close()
