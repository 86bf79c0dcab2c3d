# WORKFLOW: Browser identity rotation for outbound page fetches.
# Used by: Orchestrator when dispatching candidates to the fetch client
# Functions:
# 1. UserAgentPool.random_user_agent() - Pick one of the fixed browser user agents
# 2. fix_encoding() - Patch characters that search results sometimes leave unescaped

import random
from typing import Optional, Sequence

# Realistic browser user agents
USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Edge/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
)


class UserAgentPool:
    """Rotates through a fixed set of user agents using an injectable RNG."""

    def __init__(self, rng: Optional[random.Random] = None, agents: Sequence[str] = USER_AGENTS):
        if not agents:
            raise ValueError("User agent pool cannot be empty")
        self.rng = rng or random.Random()
        self.agents = tuple(agents)

    @classmethod
    def seeded(cls, seed: int) -> "UserAgentPool":
        """Create a pool with deterministic selection."""
        return cls(rng=random.Random(seed))

    def random_user_agent(self) -> str:
        return self.rng.choice(self.agents)


def fix_encoding(url: Optional[str]) -> Optional[str]:
    """Escape pipes and spaces left raw in discovered URLs."""
    if url is None:
        return None
    return url.replace("|", "%7C").replace(" ", "%20")
